"""Pre-submit checks on the shipping address of a fulfillment order."""

from typing import Any, Iterable, Mapping

from .countries import vendor_country_name
from .exceptions import AddressValidationError
from .schedule import has_schedule
from .snapshots import US_CANADA

REQUIRED_FIELDS = ("street", "city", "zip", "country")


def fulfillment_product_titles(products: Iterable[tuple[str, Mapping[str, Any]]]) -> list[str]:
    """Titles of the ordered products whose billing plan ships something."""
    return [title for title, plan_data in products if has_schedule(plan_data)]


def _quoted(titles: list[str]) -> str:
    return '"' + '", "'.join(titles) + '"'


def validate_address(
    fields: Mapping[str, Any],
    product_titles: Iterable[str],
) -> list[AddressValidationError]:
    """
    Check that an order's address can be shipped to.

    Only runs when the order contains fulfillment products. State is required
    for US and Canadian addresses only.

    Args:
        fields: Submitted order fields (street, city, state, zip, country)
        product_titles: Titles of fulfillment products being ordered

    Returns:
        List of AddressValidationError (empty = valid)
    """
    titles = list(product_titles)
    if not titles:
        return []

    errors = []
    country = str(fields.get("country") or "").strip().upper()

    if country and not vendor_country_name(country):
        errors.append(AddressValidationError(
            "unsupported_country",
            f"Sorry, we cannot ship {_quoted(titles)} to your country",
        ))

    missing = [name for name in REQUIRED_FIELDS if not str(fields.get(name) or "").strip()]
    if country in US_CANADA and not str(fields.get("state") or "").strip():
        missing.append("state")
    if missing:
        errors.append(AddressValidationError(
            "incomplete_address",
            f"Please specify your full shipping address to order {_quoted(titles)}",
        ))

    return errors
