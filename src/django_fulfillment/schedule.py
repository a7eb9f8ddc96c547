"""Product schedule parsing.

A billing plan carries its product schedule as free text:

    PRODUCT1,PRODUCT2:PRODUCT3,PRODUCT4

Commas separate billing periods and colons bundle products shipped in the same
period, so the example ships PRODUCT1 on the first payment, PRODUCT2 and
PRODUCT3 together on the second, and PRODUCT4 on the third.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .conf import get_setting

PERIOD_DELIMITER = ","
BUNDLE_DELIMITER = ":"

_FALSE_VALUES = {"", "0", "false", "no", "off", "none"}


@dataclass(frozen=True)
class Package:
    """Product ids shipped together in one billing period."""

    product_ids: tuple[str, ...]

    def __iter__(self):
        return iter(self.product_ids)

    def __len__(self):
        return len(self.product_ids)


@dataclass(frozen=True)
class ProductSchedule:
    """Ordered packages, one per billing period."""

    packages: tuple[Package, ...] = ()

    def __len__(self):
        return len(self.packages)

    @property
    def is_empty(self) -> bool:
        return not self.packages

    def package_at(self, index: int) -> Optional[Package]:
        """Return the package for a billing period, or None past the end."""
        if 0 <= index < len(self.packages):
            return self.packages[index]
        return None


@dataclass(frozen=True)
class PlanSnapshot:
    """Fulfillment fields of the billing plan used for a line item."""

    schedule: ProductSchedule
    always_ship: bool = False
    always_fresh: bool = False


def parse_schedule(raw: Optional[str]) -> ProductSchedule:
    """
    Parse a billing plan's product schedule text.

    Tokens are trimmed; empty tokens and empty periods are dropped. Blank input
    gives an empty schedule, meaning the plan does not ship anything.

    Args:
        raw: Schedule text, e.g. "A,B:C,D"

    Returns:
        ProductSchedule with one Package per non-empty period
    """
    if not raw or not str(raw).strip():
        return ProductSchedule()

    packages = []
    for period in str(raw).split(PERIOD_DELIMITER):
        product_ids = tuple(
            token.strip()
            for token in period.split(BUNDLE_DELIMITER)
            if token.strip()
        )
        if product_ids:
            packages.append(Package(product_ids))
    return ProductSchedule(tuple(packages))


def is_flag_set(value: Any) -> bool:
    """Interpret a custom-field checkbox value."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_VALUES
    return bool(value)


def has_schedule(plan_data: Mapping[str, Any]) -> bool:
    """Whether billing plan data carries a non-blank product schedule."""
    raw = (plan_data or {}).get(get_setting("PRODUCTS_FIELD"))
    return bool(raw and str(raw).strip())


def snapshot_from_plan_data(plan_data: Mapping[str, Any]) -> PlanSnapshot:
    plan_data = plan_data or {}
    return PlanSnapshot(
        schedule=parse_schedule(plan_data.get(get_setting("PRODUCTS_FIELD"))),
        always_ship=is_flag_set(plan_data.get(get_setting("ALWAYS_SHIP_FIELD"))),
        always_fresh=is_flag_set(plan_data.get(get_setting("ALWAYS_FRESH_FIELD"))),
    )


def resolve_plan_snapshot(line_item) -> PlanSnapshot:
    """
    Pick the billing plan data a line item ships from.

    The host snapshots plan data at original purchase. If the live plan is
    marked always-fresh, the live schedule and always-ship flag are used instead
    so products added to the plan later reach existing subscribers.

    Args:
        line_item: LineItemSnapshot

    Returns:
        PlanSnapshot built from live or purchase-time plan data
    """
    live = snapshot_from_plan_data(line_item.current_plan_data)
    if live.always_fresh:
        return live
    return snapshot_from_plan_data(line_item.plan_data)
