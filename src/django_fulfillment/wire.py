"""XML wire format of the vendor's shipping and ordering service.

Requests:
    <ShippingOptions><Country/><State_Province/><PostalCode/>
        <Product><ProductId/><Quantity/></Product>...</ShippingOptions>
    <Order><UserId/><Password/><Mode/><Name/><Company/><Address1/><Address2/>
        <City/><State_Province/><PostalCode/><Country/><ShippingDescription/>
        <Product>...</Product>...</Order>

Responses carry <ErrorCode>, <ErrorText> and, for shipping options, repeated
<Option><Description/><Price/></Option>. The service sometimes wraps the XML in
stray <HTML><BODY> tags.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from .exceptions import ProtocolError
from .planner import PlannedItem

_HTML_WRAPPER = re.compile(r"</?\s*(html|body)\s*>", re.IGNORECASE)


class OrderMode(str, Enum):
    LIVE = "LIVE"
    TEST = "TEST"


@dataclass(frozen=True)
class ShippingOption:
    description: str
    price: Decimal


@dataclass(frozen=True)
class ShippingQuoteRequest:
    country: str
    postal_code: str
    items: tuple[PlannedItem, ...]
    state: str = ""


@dataclass(frozen=True)
class ShippingQuote:
    options: tuple[ShippingOption, ...] = ()

    def cheapest(self, phase: str = "quote") -> ShippingOption:
        """Cheapest option; the first listed wins a tie."""
        if not self.options:
            raise ProtocolError("no_options", "No shipping options returned", phase)
        return sorted(self.options, key=lambda option: option.price)[0]

    def as_dict(self) -> dict[str, Decimal]:
        return {option.description: option.price for option in self.options}


@dataclass(frozen=True)
class OrderRequest:
    user_id: str
    password: str
    mode: OrderMode
    name: str
    street: str
    city: str
    postal_code: str
    country: str
    shipping_description: str
    items: tuple[PlannedItem, ...]
    state: str = ""


@dataclass(frozen=True)
class OrderConfirmation:
    order_id: str = ""
    error_text: str = ""


def _tostring(root: ET.Element) -> str:
    return ET.tostring(root, encoding="unicode", short_empty_elements=False)


def _add(parent: ET.Element, tag: str, text="") -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = "" if text is None else str(text)
    return element


def _add_products(parent: ET.Element, items) -> None:
    for item in items:
        product = ET.SubElement(parent, "Product")
        _add(product, "ProductId", item.product_id)
        _add(product, "Quantity", item.quantity)


def build_shipping_options_xml(request: ShippingQuoteRequest) -> str:
    root = ET.Element("ShippingOptions")
    _add(root, "Country", request.country)
    _add(root, "State_Province", request.state)
    _add(root, "PostalCode", request.postal_code)
    _add_products(root, request.items)
    return _tostring(root)


def build_order_xml(request: OrderRequest) -> str:
    root = ET.Element("Order")
    _add(root, "UserId", request.user_id)
    _add(root, "Password", request.password)
    _add(root, "Mode", OrderMode(request.mode).value)
    _add(root, "Name", request.name)
    _add(root, "Company")
    _add(root, "Address1", request.street)
    _add(root, "Address2")
    _add(root, "City", request.city)
    _add(root, "State_Province", request.state)
    _add(root, "PostalCode", request.postal_code)
    _add(root, "Country", request.country)
    _add(root, "ShippingDescription", request.shipping_description)
    _add_products(root, request.items)
    return _tostring(root)


def mask_password(xml: str) -> str:
    """Hide the account password before an order request is logged."""
    return re.sub(r"<Password>.*?</Password>", "<Password>***</Password>", xml, flags=re.S)


def strip_html_wrapper(body: str) -> str:
    return _HTML_WRAPPER.sub("", body or "").strip()


def _parse(body: str, phase: str) -> ET.Element:
    cleaned = strip_html_wrapper(body)
    try:
        return ET.fromstring(cleaned)
    except ET.ParseError as e:
        raise ProtocolError("invalid_xml", f"Unreadable response: {e}", phase)


def _error(root: ET.Element, phase: str) -> tuple[int, str]:
    code_text = (root.findtext(".//ErrorCode") or "0").strip() or "0"
    text = (root.findtext(".//ErrorText") or "").strip()
    try:
        code = int(code_text)
    except ValueError:
        raise ProtocolError(code_text, text or "Unreadable error code", phase)
    return code, text


def _raise_for_error(root: ET.Element, phase: str) -> str:
    code, text = _error(root, phase)
    if code != 0:
        raise ProtocolError(str(code), text, phase)
    return text


def parse_shipping_options(body: str) -> ShippingQuote:
    """
    Parse a shipping options response.

    Raises:
        ProtocolError: On a non-zero ErrorCode, bad XML or a bad price
    """
    root = _parse(body, "quote")
    _raise_for_error(root, "quote")

    options = []
    for option in root.iter("Option"):
        description = (option.findtext("Description") or "").strip()
        price_text = (option.findtext("Price") or "").strip()
        try:
            price = Decimal(price_text)
        except InvalidOperation:
            raise ProtocolError(
                "invalid_price",
                f"Unreadable price {price_text!r} for {description!r}",
                "quote",
            )
        options.append(ShippingOption(description=description, price=price))
    return ShippingQuote(options=tuple(options))


def parse_order_response(body: str) -> OrderConfirmation:
    """
    Parse an order response.

    Raises:
        ProtocolError: On a non-zero ErrorCode or bad XML
    """
    root = _parse(body, "order")
    text = _raise_for_error(root, "order")
    order_id: Optional[str] = root.findtext(".//OrderId")
    return OrderConfirmation(order_id=(order_id or "").strip(), error_text=text)
