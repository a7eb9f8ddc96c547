"""Shipment planning: which products ship for a billing event."""

import logging
from dataclasses import dataclass
from typing import Iterable

from .schedule import ProductSchedule, resolve_plan_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedItem:
    product_id: str
    quantity: int = 1


@dataclass(frozen=True)
class LinePlan:
    """Planner result for a single invoice line."""

    items: tuple[PlannedItem, ...] = ()
    schedule_exhausted: bool = False


@dataclass(frozen=True)
class ShipmentPlan:
    """Planner result for a whole invoice.

    has_schedule is True when at least one line carried a product schedule,
    which separates "nothing left to ship" from "not a fulfillment invoice".
    """

    items: tuple[PlannedItem, ...] = ()
    has_schedule: bool = False

    @property
    def is_exhausted(self) -> bool:
        return self.has_schedule and not self.items

    @property
    def product_ids(self) -> list[str]:
        return [item.product_id for item in self.items]


def package_index(payment_count: int) -> int:
    """Schedule index for a payment count. The first payment ships index 0."""
    return max(payment_count - 1, 0)


def plan_line(
    payment_count: int,
    schedule: ProductSchedule,
    history: Iterable[str],
    always_ship: bool = False,
    quantity: int = 1,
) -> LinePlan:
    """
    Plan the products one invoice line ships this cycle.

    Args:
        payment_count: Payments received on the invoice so far
        schedule: Parsed product schedule of the line's billing plan
        history: Product ids already shipped to the customer
        always_ship: Ship even if the customer already has the product
        quantity: Line quantity, applied to every product in the package

    Returns:
        LinePlan; schedule_exhausted is set when the payment count is past
        the end of the schedule
    """
    package = schedule.package_at(package_index(payment_count))
    if package is None:
        return LinePlan(schedule_exhausted=True)

    shipped = set(history)
    items = []
    seen = set()
    for product_id in package:
        if product_id in seen:
            continue
        seen.add(product_id)
        if always_ship or product_id not in shipped:
            items.append(PlannedItem(product_id, quantity))
    return LinePlan(items=tuple(items))


def plan_invoice(invoice, history: Iterable[str]) -> ShipmentPlan:
    """
    Plan the products an invoice ships for its current payment count.

    Lines without a product schedule are ignored. A line whose schedule has run
    out contributes nothing and is not reported here; the caller decides what
    an empty plan means via ShipmentPlan.is_exhausted.

    Args:
        invoice: InvoiceSnapshot
        history: Product ids already shipped to the customer

    Returns:
        ShipmentPlan with line results concatenated in invoice order
    """
    history = frozenset(history)
    has_schedule = False
    items: list[PlannedItem] = []

    for line_item in invoice.items:
        snapshot = resolve_plan_snapshot(line_item)
        if snapshot.schedule.is_empty:
            continue
        has_schedule = True

        logger.debug(
            "Examining package at index %s in: %s",
            package_index(invoice.payments_count),
            line_item.description,
        )
        line_plan = plan_line(
            invoice.payments_count,
            snapshot.schedule,
            history,
            always_ship=snapshot.always_ship,
            quantity=line_item.quantity,
        )
        for item in line_plan.items:
            logger.debug(
                "Going to ship '%s' (x %s) in: %s",
                item.product_id,
                item.quantity,
                line_item.description,
            )
        items.extend(line_plan.items)

    return ShipmentPlan(items=tuple(items), has_schedule=has_schedule)
