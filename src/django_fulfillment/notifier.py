"""Admin alerts for failed or exhausted fulfillment.

Every failure path funnels through warn_admin(). Sending is best effort: a
broken mail setup is logged and never hides the failure being reported.
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMessage

from .conf import get_setting
from .exceptions import (
    NothingToShip,
    ProtocolError,
    ShippingCostExceeded,
    StaleInventoryError,
    TransportError,
)
from .models import FulfillmentSettings

logger = logging.getLogger(__name__)


def get_admin_email(config: Optional[FulfillmentSettings] = None) -> str:
    """
    Resolve the alert recipient.

    Resolution order:
    1. admin_email on FulfillmentSettings
    2. FULFILLMENT_ADMIN_EMAIL setting
    3. First address in Django's ADMINS
    """
    config = config or FulfillmentSettings.get_instance()
    if config.admin_email:
        return config.admin_email
    if get_setting("ADMIN_EMAIL"):
        return get_setting("ADMIN_EMAIL")
    admins = getattr(settings, "ADMINS", None) or []
    if admins:
        return admins[0][1]
    return ""


def format_body(msg: str) -> str:
    site_title = get_setting("SITE_TITLE")
    return f"Dear Admin,\n\n{msg}\n\nRegards,\n\n{site_title}".rstrip() + "\n"


def warn_admin(subject: str, msg: str) -> bool:
    """
    Email the admin if alerts are enabled.

    Returns:
        True if an email was handed to the mail backend
    """
    config = FulfillmentSettings.get_instance()
    if not config.warn_admin:
        return False

    admin_email = get_admin_email(config)
    if not admin_email:
        logger.error("Admin alerts enabled but no admin email configured: %s", subject)
        return False

    message = EmailMessage(
        subject=subject,
        body=format_body(msg),
        to=[admin_email],
    )
    try:
        message.send()
    except Exception as e:
        logger.error(
            "Error sending warning email to %s: %s: %s",
            admin_email,
            type(e).__name__,
            e,
        )
        return False
    return True


def failure_message(error: Exception, invoice) -> tuple[str, str]:
    """Subject and body describing why an invoice could not be shipped."""
    name = invoice.address.name
    who = f"{name} (id:{invoice.customer_id})"
    description = invoice.description

    if isinstance(error, NothingToShip):
        return (
            f"Fulfillment: Nothing available to ship to {name} in: {description}",
            f"You have just received a payment from {who} but you have no "
            f"fulfillment products left to ship them in: {description}. Either "
            "they have the products already or you have run out of products "
            "to ship.",
        )

    if isinstance(error, ShippingCostExceeded):
        return (
            f"Fulfillment: Shipping costs over limit for {who}!",
            f"Can't ship to {who} because the cheapest shipping quote "
            f"({error.option.description}: ${error.option.price}) was over the "
            f"Max Shipping Cost (${error.max_cost}) set in the fulfillment settings.",
        )

    if isinstance(error, ProtocolError) and error.phase == "quote":
        return (
            f"Fulfillment: Could not get shipping options for {who}!",
            f"Could not ship to {who} because the vendor returned a shipping "
            f"options error whilst trying to order: {description}\n\n"
            f"(Code: {error.code}) {error.text}",
        )

    if isinstance(error, ProtocolError):
        return (
            f"Fulfillment: Order failed for {who}!",
            f"Order failed for {who}! The vendor returned an ordering error "
            f"(Code: {error.code}) whilst trying to order: {description}\n\n"
            f"{error.text}",
        )

    if isinstance(error, TransportError):
        request = "Shipping" if error.phase == "quote" else "Order"
        return (
            f"Fulfillment: Order failed for {who}!",
            f"Could not ship to {who} because of an error sending the XML "
            f"{request} request: {error}. Please process manually.",
        )

    if isinstance(error, StaleInventoryError):
        return (
            f"Fulfillment: Order placed but not recorded for {who}!",
            f"The vendor accepted the order for {who} ({description}) but the "
            "shipment history and inventory could not be updated. Update the "
            "customer's shipped products manually before the next payment.",
        )

    return (
        f"Fulfillment: Order failed for {who}!",
        f"Could not ship to {who} in: {description} because of an unexpected "
        f"error: {type(error).__name__}: {error}. Please process manually.",
    )


def notify_failure(error: Exception, invoice) -> bool:
    subject, msg = failure_message(error, invoice)
    return warn_admin(subject, msg)
