"""django-fulfillment: Subscription print-on-demand fulfillment."""

__version__ = "0.1.0"

__all__ = [
    # Models
    "FulfillmentSettings",
    "ShipmentAttempt",
    "ShipmentHistory",
    # Services
    "ship_invoice",
    "on_invoice_started",
    "on_payment_received",
    "run_daily_sweep",
    "validate_address",
    # Exceptions
    "FulfillmentError",
    "AddressValidationError",
    "TransportError",
    "ProtocolError",
    "BusinessError",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name in ("FulfillmentSettings", "ShipmentAttempt", "ShipmentHistory"):
        from . import models

        return getattr(models, name)
    if name in (
        "ship_invoice",
        "on_invoice_started",
        "on_payment_received",
        "run_daily_sweep",
        "validate_address",
    ):
        from . import services

        return getattr(services, name)
    if name in (
        "FulfillmentError",
        "AddressValidationError",
        "TransportError",
        "ProtocolError",
        "BusinessError",
    ):
        from . import exceptions

        return getattr(exceptions, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
