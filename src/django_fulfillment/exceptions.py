"""Exceptions for django-fulfillment."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure category, used for logging and admin alerts."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    BUSINESS = "business"
    STORAGE = "storage"


class FulfillmentError(Exception):
    """Base exception for fulfillment errors."""

    kind: ErrorKind = ErrorKind.BUSINESS
    code = ""


class AddressValidationError(FulfillmentError):
    """Shipping address cannot be used for a fulfillment order."""

    kind = ErrorKind.VALIDATION

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class TransportError(FulfillmentError):
    """Vendor endpoint unreachable, timed out or returned a non-200 status."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, phase: str, original_error: Exception = None):
        self.phase = phase
        self.original_error = original_error
        super().__init__(f"[{phase}] {message}")


class ProtocolError(FulfillmentError):
    """Vendor returned an error code or an unreadable response."""

    kind = ErrorKind.PROTOCOL

    def __init__(self, code: str, text: str, phase: str):
        self.code = str(code)
        self.text = text
        self.phase = phase
        super().__init__(f"[{phase}] (Code: {code}) {text}")


class BusinessError(FulfillmentError):
    """Order refused by a business rule. Not a system fault."""

    kind = ErrorKind.BUSINESS


class ShippingCostExceeded(BusinessError):
    """Cheapest shipping quote is above the configured maximum."""

    code = "shipping_cost_exceeded"

    def __init__(self, option, max_cost):
        self.option = option
        self.max_cost = max_cost
        super().__init__(
            f"Cheapest shipping quote ({option.description}: ${option.price}) "
            f"is over the maximum shipping cost (${max_cost})"
        )


class NothingToShip(BusinessError):
    """Invoice carries fulfillment products but none are left to ship."""

    code = "nothing_to_ship"

    def __init__(self, customer_name: str, description: str):
        self.customer_name = customer_name
        self.description = description
        super().__init__(f"Nothing available to ship to {customer_name} in: {description}")


class StaleInventoryError(FulfillmentError):
    """Inventory blob changed between load and save."""

    kind = ErrorKind.STORAGE
    code = "stale_inventory"

    def __init__(self, expected_version: int):
        self.expected_version = expected_version
        super().__init__(f"Inventory changed since version {expected_version}")


class InvalidTransition(FulfillmentError):
    """Raised when a shipment attempt is moved to a state it cannot reach."""

    kind = ErrorKind.STORAGE
    code = "invalid_transition"

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Cannot transition from '{from_state}' to '{to_state}'")
