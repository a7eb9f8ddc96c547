"""Read-only views of host billing data consumed by the fulfillment engine.

The host project builds these from its own invoice, line item and billing plan
records when a billing event fires. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

US_CANADA = ("US", "CA")


@dataclass(frozen=True)
class ShippingAddress:
    """Customer name and postal address from the invoice."""

    first_name: str = ""
    last_name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def requires_state(self) -> bool:
        """Vendor only takes a state/province for US and Canadian addresses."""
        return self.country in US_CANADA

    @property
    def vendor_state(self) -> str:
        return self.state if self.requires_state else ""


@dataclass(frozen=True)
class LineItemSnapshot:
    """One invoice line with both purchase-time and live billing plan data."""

    description: str
    quantity: int = 1
    plan_data: Mapping[str, Any] = field(default_factory=dict)
    current_plan_data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InvoiceSnapshot:
    """A billing event's invoice, as seen by the fulfillment engine.

    Attributes:
        reference: Host invoice identifier (for logs and attempt records)
        customer: Host user instance the invoice belongs to
        payments_count: Payments received so far (0 on a free signup)
        address: Shipping name and address
        items: Invoice lines in invoice order
    """

    reference: str
    customer: Any
    payments_count: int
    address: ShippingAddress
    items: tuple[LineItemSnapshot, ...] = ()

    @property
    def customer_id(self):
        return getattr(self.customer, "pk", None)

    @property
    def description(self) -> str:
        return ", ".join(item.description for item in self.items)
