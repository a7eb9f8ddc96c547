"""Tests for the vendor XML codec."""

from decimal import Decimal
import xml.etree.ElementTree as ET

import pytest

from django_fulfillment.exceptions import ProtocolError
from django_fulfillment.planner import PlannedItem
from django_fulfillment.wire import (
    OrderMode,
    OrderRequest,
    ShippingOption,
    ShippingQuote,
    ShippingQuoteRequest,
    build_order_xml,
    build_shipping_options_xml,
    mask_password,
    parse_order_response,
    parse_shipping_options,
    strip_html_wrapper,
)
from tests.helpers import order_xml, shipping_options_xml


def order_request(**overrides):
    fields = dict(
        user_id="shop@example.com",
        password="secret",
        mode=OrderMode.LIVE,
        name="Jane Doe",
        street="1 Main St",
        city="Springfield",
        state="IL",
        postal_code="62701",
        country="United States",
        shipping_description="USPS First Class Mail",
        items=(PlannedItem("PX001", 2),),
    )
    fields.update(overrides)
    return OrderRequest(**fields)


class TestBuildRequests:
    """Tests for request document builders."""

    def test_shipping_options_document(self):
        request = ShippingQuoteRequest(
            country="Canada",
            state="ON",
            postal_code="K1A 0B1",
            items=(PlannedItem("PX001"), PlannedItem("PX002", 3)),
        )

        xml = build_shipping_options_xml(request)

        assert xml == (
            "<ShippingOptions><Country>Canada</Country>"
            "<State_Province>ON</State_Province><PostalCode>K1A 0B1</PostalCode>"
            "<Product><ProductId>PX001</ProductId><Quantity>1</Quantity></Product>"
            "<Product><ProductId>PX002</ProductId><Quantity>3</Quantity></Product>"
            "</ShippingOptions>"
        )

    def test_order_document_field_order(self):
        root = ET.fromstring(build_order_xml(order_request()))

        assert [child.tag for child in root] == [
            "UserId", "Password", "Mode", "Name", "Company", "Address1",
            "Address2", "City", "State_Province", "PostalCode", "Country",
            "ShippingDescription", "Product",
        ]
        assert root.findtext("Mode") == "LIVE"
        assert root.findtext("Company") == ""
        assert root.findtext("Product/Quantity") == "2"

    def test_empty_elements_not_self_closed(self):
        xml = build_order_xml(order_request(state=""))

        assert "<State_Province></State_Province>" in xml
        assert "<Company></Company>" in xml

    def test_test_mode(self):
        xml = build_order_xml(order_request(mode=OrderMode.TEST))

        assert "<Mode>TEST</Mode>" in xml

    def test_special_characters_escaped(self):
        xml = build_order_xml(order_request(name="Smith & Sons <Ltd>"))

        assert ET.fromstring(xml).findtext("Name") == "Smith & Sons <Ltd>"

    def test_mask_password(self):
        xml = mask_password(build_order_xml(order_request()))

        assert "secret" not in xml
        assert "<Password>***</Password>" in xml


class TestParseShippingOptions:
    """Tests for parse_shipping_options()."""

    def test_options(self):
        quote = parse_shipping_options(shipping_options_xml(
            ("UPS Ground", "6.50"),
            ("USPS First Class Mail", "2.75"),
        ))

        assert quote.options == (
            ShippingOption("UPS Ground", Decimal("6.50")),
            ShippingOption("USPS First Class Mail", Decimal("2.75")),
        )
        assert quote.cheapest() == ShippingOption("USPS First Class Mail", Decimal("2.75"))

    def test_html_wrapper_removed(self):
        assert strip_html_wrapper("<html> <body><R/></BODY></Html>") == "<R/>"

    def test_error_code(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_shipping_options(shipping_options_xml(code=300, text="Invalid country"))

        assert exc_info.value.code == "300"
        assert exc_info.value.text == "Invalid country"
        assert exc_info.value.phase == "quote"

    def test_negative_error_code(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_shipping_options(shipping_options_xml(("Mail", "2.00"), code=-1, text="Server busy"))

        assert exc_info.value.code == "-1"
        assert exc_info.value.phase == "quote"

    def test_missing_error_code_is_success(self):
        quote = parse_shipping_options(
            "<Response><Option><Description>Mail</Description><Price>1</Price></Option></Response>"
        )

        assert quote.cheapest().description == "Mail"

    def test_invalid_xml(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_shipping_options("Service Unavailable")

        assert exc_info.value.code == "invalid_xml"

    def test_invalid_price(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_shipping_options(shipping_options_xml(("Mail", "free")))

        assert exc_info.value.code == "invalid_price"

    def test_non_numeric_error_code(self):
        with pytest.raises(ProtocolError):
            parse_shipping_options("<Response><ErrorCode>X</ErrorCode></Response>")


class TestShippingQuote:

    def test_tie_keeps_first_listed(self):
        quote = ShippingQuote(options=(
            ShippingOption("Second Class", Decimal("3.00")),
            ShippingOption("First Class", Decimal("3.00")),
        ))

        assert quote.cheapest().description == "Second Class"

    def test_no_options(self):
        with pytest.raises(ProtocolError) as exc_info:
            ShippingQuote().cheapest()

        assert exc_info.value.code == "no_options"


class TestParseOrderResponse:

    def test_order_id(self):
        confirmation = parse_order_response(order_xml("ORD-123"))

        assert confirmation.order_id == "ORD-123"

    def test_test_mode_has_no_order_id(self):
        confirmation = parse_order_response(order_xml(""))

        assert confirmation.order_id == ""

    def test_error(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_order_response(order_xml(code=500, text="Invalid credentials"))

        assert exc_info.value.phase == "order"
        assert "(Code: 500) Invalid credentials" in str(exc_info.value)

    def test_negative_error_code(self):
        with pytest.raises(ProtocolError) as exc_info:
            parse_order_response(order_xml("ORD-9", code=-5, text="Order rejected"))

        assert exc_info.value.code == "-5"
        assert exc_info.value.phase == "order"


def test_cheapest_of_three():
    quote = parse_shipping_options(shipping_options_xml(
        ("Ground", "12.50"),
        ("Air", "9.99"),
        ("Express", "30.00"),
    ))

    assert quote.cheapest() == ShippingOption("Air", Decimal("9.99"))
