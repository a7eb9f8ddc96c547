"""Tests for shipping address validation."""

import pytest

from django_fulfillment.validation import fulfillment_product_titles, validate_address
from tests.helpers import plan_data

TITLES = ["Monthly CD"]

FULL_ADDRESS = {
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "country": "US",
}


def codes(errors):
    return [error.code for error in errors]


class TestValidateAddress:
    """Tests for validate_address()."""

    def test_valid(self):
        assert validate_address(FULL_ADDRESS, TITLES) == []

    def test_no_fulfillment_products(self):
        assert validate_address({}, []) == []

    def test_unsupported_country(self):
        errors = validate_address({**FULL_ADDRESS, "country": "BD", "state": ""}, TITLES)

        assert codes(errors) == ["unsupported_country"]
        assert errors[0].message == 'Sorry, we cannot ship "Monthly CD" to your country'

    @pytest.mark.parametrize("field", ["street", "city", "zip", "country"])
    def test_missing_field(self, field):
        errors = validate_address({**FULL_ADDRESS, field: ""}, TITLES)

        assert codes(errors) == ["incomplete_address"]

    def test_state_required_for_us_and_canada(self):
        errors = validate_address({**FULL_ADDRESS, "country": "CA", "state": " "}, TITLES)

        assert codes(errors) == ["incomplete_address"]

    def test_state_optional_elsewhere(self):
        address = {**FULL_ADDRESS, "country": "GB", "state": ""}

        assert validate_address(address, TITLES) == []

    def test_both_errors(self):
        errors = validate_address({"country": "BD"}, TITLES)

        assert codes(errors) == ["unsupported_country", "incomplete_address"]

    def test_titles_in_message(self):
        errors = validate_address({}, ["CD One", "CD Two"])

        assert errors[0].message == (
            'Please specify your full shipping address to order "CD One", "CD Two"'
        )

    def test_lowercase_country(self):
        assert validate_address({**FULL_ADDRESS, "country": "us"}, TITLES) == []

    def test_custom_country_lookup(self, settings):
        settings.FULFILLMENT_COUNTRY_LOOKUP = "tests.test_validation.all_canada"

        assert validate_address({**FULL_ADDRESS, "country": "XX"}, TITLES) == []


def all_canada(code):
    return "Canada"


def test_fulfillment_product_titles():
    products = [
        ("Software", {}),
        ("Monthly CD", plan_data("A,B")),
        ("Blank", {"fulfillment-products": " "}),
    ]

    assert fulfillment_product_titles(products) == ["Monthly CD"]
