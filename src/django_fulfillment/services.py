"""Service functions for django-fulfillment.

Provides the entry points a host billing project calls:
- on_invoice_started: First payment or free signup on an invoice
- on_payment_received: Every payment, including rebills
- ship_invoice: Plan and place the vendor order for a billing event
- run_daily_sweep: Daily inventory aging check
- validate_address: Pre-submit address check for fulfillment orders

Failures never propagate to the host: they are logged, recorded on a
ShipmentAttempt and reported to the admin, so a payment is never rolled back
because an order could not be placed.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction

from .client import FulfillmentRun, VendorClient
from .countries import vendor_country_name
from .exceptions import AddressValidationError, FulfillmentError, NothingToShip
from .inventory import InventorySweep, record_shipped, run_inventory_sweep
from .models import FulfillmentSettings, ShipmentAttempt, ShipmentHistory
from .notifier import notify_failure
from .planner import ShipmentPlan, plan_invoice
from .snapshots import InvoiceSnapshot
from .validation import validate_address
from .wire import OrderMode, OrderRequest, ShippingQuoteRequest

logger = logging.getLogger(__name__)

__all__ = [
    "get_shipped_products",
    "mark_shipped",
    "on_invoice_started",
    "on_payment_received",
    "run_daily_sweep",
    "ship_invoice",
    "validate_address",
]


def get_shipped_products(customer) -> set[str]:
    """Product ids already shipped to a customer."""
    history = ShipmentHistory.objects.filter(customer=customer).first()
    return history.product_ids if history else set()


@transaction.atomic
def mark_shipped(customer, product_ids: Iterable[str]) -> ShipmentHistory:
    """Add product ids to a customer's shipment history."""
    history, _ = ShipmentHistory.objects.select_for_update().get_or_create(
        customer=customer
    )
    history.add_products(product_ids)
    history.save(update_fields=["shipped_products", "updated_at"])
    return history


@transaction.atomic
def _commit_shipment(customer, plan: ShipmentPlan) -> None:
    """Record a confirmed order. History and inventory change together or not at all."""
    mark_shipped(customer, plan.product_ids)
    record_shipped(plan.product_ids)


def _build_requests(invoice: InvoiceSnapshot, plan: ShipmentPlan, config: FulfillmentSettings):
    address = invoice.address
    country = vendor_country_name(address.country)
    logger.debug("Country name = %s, country = %s", country, address.country)
    if not country:
        raise AddressValidationError(
            "unsupported_country",
            f"Cannot ship to country '{address.country}'",
        )

    quote_request = ShippingQuoteRequest(
        country=country,
        state=address.vendor_state,
        postal_code=address.zip,
        items=plan.items,
    )
    order_request = OrderRequest(
        user_id=config.vendor_user_id,
        password=config.vendor_password,
        mode=OrderMode.TEST if config.no_ship else OrderMode.LIVE,
        name=address.name,
        street=address.street,
        city=address.city,
        state=address.vendor_state,
        postal_code=address.zip,
        country=country,
        shipping_description="",
        items=plan.items,
    )
    return quote_request, order_request


def _record_failure(attempt: Optional[ShipmentAttempt], error: Exception, invoice) -> None:
    """Mark the attempt failed and alert the admin. Never raises."""
    if attempt is not None:
        try:
            FulfillmentRun(attempt, client=None).fail(error)
        except Exception:
            logger.exception("Could not record failure for invoice %s", invoice.reference)
    try:
        notify_failure(error, invoice)
    except Exception:
        logger.exception("Could not send failure alert for invoice %s", invoice.reference)


def ship_invoice(
    invoice: InvoiceSnapshot,
    client: Optional[VendorClient] = None,
) -> Optional[ShipmentAttempt]:
    """
    Ship whatever the invoice's current billing period owes the customer.

    Never raises: every failure is logged, recorded on the attempt (when one
    was created) and reported to the admin.

    Args:
        invoice: Snapshot of the invoice that triggered the event
        client: VendorClient to use (a new one is opened and closed if omitted)

    Returns:
        The ShipmentAttempt (state shipped or failed), or None when the invoice
        carries no fulfillment products, the vendor account is not configured
        or the failure happened before an attempt could be recorded
    """
    attempt = None
    owns_client = client is None
    try:
        config = FulfillmentSettings.get_instance()
        if not config.is_configured():
            logger.warning(
                "Vendor credentials not configured, not shipping invoice %s",
                invoice.reference,
            )
            return None

        plan = plan_invoice(invoice, get_shipped_products(invoice.customer))
        if not plan.has_schedule:
            return None

        attempt = ShipmentAttempt.objects.create(
            customer=invoice.customer,
            invoice_reference=str(invoice.reference),
            payments_count=invoice.payments_count,
            items=[
                {"product_id": item.product_id, "quantity": item.quantity}
                for item in plan.items
            ],
            mode=(OrderMode.TEST if config.no_ship else OrderMode.LIVE).value,
        )

        if plan.is_exhausted:
            raise NothingToShip(invoice.address.name, invoice.description)

        quote_request, order_request = _build_requests(invoice, plan, config)
        client = client or VendorClient()
        run = FulfillmentRun(attempt, client)
        confirmation = run.execute(quote_request, order_request, config.max_shipping_cost)

        _commit_shipment(invoice.customer, plan)
        run.transition(ShipmentAttempt.State.SHIPPED)
        logger.info(
            "Shipped %s to customer %s for invoice %s (order %s, %s)",
            ", ".join(plan.product_ids),
            invoice.customer_id,
            invoice.reference,
            confirmation.order_id or "-",
            attempt.mode,
        )
    except FulfillmentError as e:
        logger.error(
            "Fulfillment failed for invoice %s (%s): %s",
            invoice.reference,
            e.kind.value,
            e,
        )
        _record_failure(attempt, e, invoice)
    except Exception as e:
        logger.exception("Unexpected fulfillment error for invoice %s", invoice.reference)
        _record_failure(attempt, e, invoice)
    finally:
        if owns_client and client is not None:
            client.close()

    return attempt


def on_invoice_started(invoice: InvoiceSnapshot, client=None) -> Optional[ShipmentAttempt]:
    """Called once per invoice, on first payment or free signup."""
    return ship_invoice(invoice, client=client)


def on_payment_received(invoice: InvoiceSnapshot, client=None) -> Optional[ShipmentAttempt]:
    """Called for every payment. The first one is handled by on_invoice_started."""
    if invoice.payments_count == 1:
        return None
    return ship_invoice(invoice, client=client)


def run_daily_sweep(now=None, dry_run: bool = False) -> Optional[InventorySweep]:
    """
    Daily trigger for the inventory aging check.

    Args:
        now: Current time (defaults to timezone.now())
        dry_run: Report aging products without pruning or alerting

    Returns:
        The InventorySweep, or None if the sweep did not run or failed
    """
    try:
        return run_inventory_sweep(now, dry_run=dry_run)
    except FulfillmentError as e:
        logger.error("Inventory sweep failed: %s", e)
        return None
