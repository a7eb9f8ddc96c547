"""Vendor client: shipping quote, cost check and order submission."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import httpx
from django.utils import timezone

from .conf import get_setting
from .exceptions import (
    FulfillmentError,
    InvalidTransition,
    ShippingCostExceeded,
    TransportError,
)
from .models import ShipmentAttempt
from .wire import (
    OrderConfirmation,
    OrderRequest,
    ShippingOption,
    ShippingQuote,
    ShippingQuoteRequest,
    build_order_xml,
    build_shipping_options_xml,
    mask_password,
    parse_order_response,
    parse_shipping_options,
)

logger = logging.getLogger(__name__)

State = ShipmentAttempt.State


class VendorClient:
    """Blocking XML-over-HTTP client for the fulfillment vendor."""

    HEADERS = {"Content-type": "text/xml"}

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url or get_setting("VENDOR_URL")
        self.timeout = timeout if timeout is not None else get_setting("REQUEST_TIMEOUT")
        self.client = client or httpx.Client(timeout=self.timeout)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _post(self, body: str, phase: str) -> str:
        try:
            response = self.client.post(self.url, content=body, headers=self.HEADERS)
        except httpx.HTTPError as e:
            logger.error("Error sending %s request: %s: %s", phase, type(e).__name__, e)
            raise TransportError(f"{type(e).__name__}: {e}", phase=phase, original_error=e)

        if response.status_code != 200:
            logger.error("Vendor %s gateway unavailable (HTTP %s)", phase, response.status_code)
            raise TransportError(
                f"Gateway unavailable (HTTP {response.status_code})", phase=phase
            )
        return response.text

    def get_shipping_quote(self, request: ShippingQuoteRequest) -> ShippingQuote:
        """
        Ask the vendor for shipping options.

        Raises:
            TransportError: Connection failure, timeout or non-200 status
            ProtocolError: Vendor error code or unreadable response
        """
        body = build_shipping_options_xml(request)
        logger.debug("Shipping options request: %s", body)
        response = self._post(body, "quote")
        logger.debug("Shipping options response: %r", response)
        quote = parse_shipping_options(response)
        logger.debug("Shipping options (unsorted): %s", quote.as_dict())
        return quote

    def place_order(self, request: OrderRequest) -> OrderConfirmation:
        """
        Submit an order.

        Raises:
            TransportError: Connection failure, timeout or non-200 status
            ProtocolError: Vendor error code or unreadable response
        """
        body = build_order_xml(request)
        logger.debug("Order request: %s", mask_password(body))
        response = self._post(body, "order")
        logger.debug("Order response: %r", response)
        return parse_order_response(response)


def check_shipping_cost(option: ShippingOption, max_cost) -> None:
    """
    Refuse shipping above the configured cap. A cap of 0 means no limit.

    Raises:
        ShippingCostExceeded: If option.price > max_cost > 0
    """
    max_cost = Decimal(max_cost or 0)
    if max_cost > 0 and option.price > max_cost:
        raise ShippingCostExceeded(option, max_cost)


class FulfillmentRun:
    """
    One pass through the quote -> cost check -> order protocol.

    Each step moves the ShipmentAttempt through its state machine and saves
    it. Any failure moves the attempt to failed and is re-raised for the
    caller to report.
    """

    def __init__(self, attempt: ShipmentAttempt, client: VendorClient):
        self.attempt = attempt
        self.client = client

    def transition(self, to_state: str, **fields) -> None:
        if not self.attempt.can_transition_to(to_state):
            raise InvalidTransition(self.attempt.state, to_state)

        self.attempt.state = to_state
        for name, value in fields.items():
            setattr(self.attempt, name, value)
        if to_state in ShipmentAttempt.TERMINAL_STATES:
            self.attempt.finished_at = timezone.now()
        self.attempt.save()

    def fail(self, error: Exception) -> None:
        """Record a failure unless the attempt already ended."""
        if self.attempt.is_terminal:
            return
        kind = getattr(error, "kind", None)
        self.transition(
            State.FAILED,
            error_kind=kind.value if kind else "unexpected",
            error_code=getattr(error, "code", "") or type(error).__name__,
            error_message=str(error),
        )

    def execute(
        self,
        quote_request: ShippingQuoteRequest,
        order_request: OrderRequest,
        max_cost,
    ) -> OrderConfirmation:
        """
        Run the protocol.

        order_request.shipping_description is ignored; the cheapest quoted
        option is filled in.

        Returns:
            OrderConfirmation from the vendor

        Raises:
            FulfillmentError: TransportError, ProtocolError or ShippingCostExceeded
        """
        try:
            self.transition(State.QUOTE_REQUESTED)
            quote = self.client.get_shipping_quote(quote_request)
            cheapest = quote.cheapest()
            logger.debug(
                "Max shipping rate: %s, cheapest shipping option: %s, cost: %s",
                max_cost,
                cheapest.description,
                cheapest.price,
            )
            self.transition(
                State.QUOTE_RECEIVED,
                shipping_description=cheapest.description,
                shipping_price=cheapest.price,
            )

            check_shipping_cost(cheapest, max_cost)
            self.transition(State.COST_VALIDATED)

            order_request = _with_shipping(order_request, cheapest.description)
            confirmation = self.client.place_order(order_request)
            self.transition(
                State.ORDER_SUBMITTED,
                vendor_order_id=confirmation.order_id,
            )
            return confirmation
        except FulfillmentError as e:
            self.fail(e)
            raise


def _with_shipping(request: OrderRequest, description: str) -> OrderRequest:
    return replace(request, shipping_description=description)
