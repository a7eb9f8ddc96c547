"""Django Fulfillment configuration.

Operator-editable options (credentials, cost cap, feature toggles) live on the
FulfillmentSettings singleton. Deployment options are read from Django settings
with the FULFILLMENT_ prefix.

Example:
    # settings.py
    FULFILLMENT_VENDOR_URL = 'http://kunaki.com/XMLService.ASP'
    FULFILLMENT_REQUEST_TIMEOUT = 30.0
    FULFILLMENT_ADMIN_EMAIL = 'orders@example.com'
    FULFILLMENT_COUNTRY_LOOKUP = 'myproject.geo.country_title'
"""

from functools import lru_cache
from importlib import import_module

from django.conf import settings


DEFAULTS = {
    "VENDOR_URL": "http://kunaki.com/XMLService.ASP",
    "REQUEST_TIMEOUT": 30.0,
    "ADMIN_EMAIL": "",
    "SITE_TITLE": "",
    "COUNTRY_LOOKUP": "django_fulfillment.countries.iso_country_title",
    "INVENTORY_RETRIES": 3,
    # Billing-plan custom field names
    "PRODUCTS_FIELD": "fulfillment-products",
    "ALWAYS_SHIP_FIELD": "fulfillment-always-ship",
    "ALWAYS_FRESH_FIELD": "fulfillment-always-fresh",
}


def get_setting(name: str, default=None):
    """Get a setting with FULFILLMENT_ prefix, falling back to DEFAULTS."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"FULFILLMENT_{name}", default)


@lru_cache(maxsize=16)
def load_callable(dotted_path: str):
    """Import a callable from a dotted path."""
    try:
        module_path, attr = dotted_path.rsplit(".", 1)
    except ValueError:
        raise ImportError(f"Invalid dotted path: {dotted_path!r}")

    module = import_module(module_path)
    try:
        func = getattr(module, attr)
    except AttributeError:
        raise ImportError(f"'{attr}' not found in module '{module_path}'")

    if not callable(func):
        raise ImportError(f"'{dotted_path}' is not callable")
    return func


def get_country_lookup():
    """Return the configured country code -> country title lookup."""
    return load_callable(get_setting("COUNTRY_LOOKUP"))
