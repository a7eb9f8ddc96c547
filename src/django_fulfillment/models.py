"""Models for django-fulfillment."""

from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models, transaction

from .mixins import EnvFallbackMixin


class FulfillmentBaseModel(models.Model):
    """Base model with timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class FulfillmentSettings(EnvFallbackMixin, models.Model):
    """
    Operator configuration for the fulfillment vendor account.

    Singleton: always pk=1, access via FulfillmentSettings.get_instance().
    Credentials fall back to FULFILLMENT_USER_ID / FULFILLMENT_PASSWORD
    environment variables when left blank.
    """

    user_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Vendor account user id, usually an email address",
    )
    password = models.CharField(
        max_length=255,
        blank=True,
        help_text="Vendor account password",
    )
    no_ship = models.BooleanField(
        default=False,
        help_text="Submit orders in TEST mode so the vendor does not process them",
    )
    max_shipping_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Reject orders whose cheapest shipping is above this (0 = no limit)",
    )
    check_inventory = models.BooleanField(
        default=False,
        help_text="Warn daily about products not ordered for 150+ days",
    )
    warn_admin = models.BooleanField(
        default=False,
        help_text="Email the admin when an order fails",
    )
    admin_email = models.EmailField(
        blank=True,
        help_text="Recipient for order alerts (defaults to FULFILLMENT_ADMIN_EMAIL)",
    )

    ENV_FALLBACKS = {
        "user_id": "FULFILLMENT_USER_ID",
        "password": "FULFILLMENT_PASSWORD",
    }

    class Meta:
        verbose_name = "Fulfillment Settings"
        verbose_name_plural = "Fulfillment Settings"

    def __str__(self):
        mode = "TEST" if self.no_ship else "LIVE"
        return f"FulfillmentSettings ({mode})"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise IntegrityError(f"Cannot delete singleton {self.__class__.__name__}")

    @classmethod
    def get_instance(cls) -> "FulfillmentSettings":
        """Get or create the singleton instance."""
        try:
            with transaction.atomic():
                obj, _ = cls.objects.get_or_create(pk=1)
                return obj
        except IntegrityError:
            # Another process created it
            return cls.objects.get(pk=1)

    @property
    def vendor_user_id(self) -> str:
        return self.get_with_fallback("user_id")

    @property
    def vendor_password(self) -> str:
        return self.get_with_fallback("password")

    def is_configured(self) -> bool:
        return bool(self.vendor_user_id and self.vendor_password)


class ShipmentHistory(FulfillmentBaseModel):
    """
    Products already shipped to a customer.

    Stored as a comma-joined, deduplicated id list so operators can edit it to
    force or suppress a re-shipment.
    """

    customer = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="shipment_history",
    )
    shipped_products = models.TextField(
        blank=True,
        help_text="Comma-separated product ids already shipped to this customer",
    )

    class Meta:
        verbose_name = "shipment history"
        verbose_name_plural = "shipment histories"

    def __str__(self):
        return f"{self.customer}: {self.shipped_products or '-'}"

    @property
    def product_ids(self) -> set[str]:
        return {
            product_id.strip()
            for product_id in self.shipped_products.split(",")
            if product_id.strip()
        }

    def add_products(self, product_ids) -> None:
        """Append product ids, keeping first-shipped order and dropping repeats."""
        ordered = [p.strip() for p in self.shipped_products.split(",") if p.strip()]
        for product_id in product_ids:
            if product_id and product_id not in ordered:
                ordered.append(product_id)
        self.shipped_products = ",".join(ordered)


class StoredBlob(FulfillmentBaseModel):
    """
    Key/value blob store with a version counter.

    Writers pass the version they read; a save against a newer version is
    rejected so concurrent read-modify-write cycles cannot lose updates.
    """

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    version = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.key} (v{self.version})"


class ShipmentAttempt(FulfillmentBaseModel):
    """
    Audit record of one fulfillment attempt for a billing event.

    State machine:
        idle -> quote_requested -> quote_received -> cost_validated
             -> order_submitted -> shipped
    Any non-terminal state can move to failed. Failed attempts are not retried
    automatically; an operator reprocesses them.
    """

    class State(models.TextChoices):
        IDLE = "idle", "Idle"
        QUOTE_REQUESTED = "quote_requested", "Quote Requested"
        QUOTE_RECEIVED = "quote_received", "Quote Received"
        COST_VALIDATED = "cost_validated", "Cost Validated"
        ORDER_SUBMITTED = "order_submitted", "Order Submitted"
        SHIPPED = "shipped", "Shipped"
        FAILED = "failed", "Failed"

    TRANSITIONS = {
        State.IDLE.value: [State.QUOTE_REQUESTED, State.FAILED],
        State.QUOTE_REQUESTED.value: [State.QUOTE_RECEIVED, State.FAILED],
        State.QUOTE_RECEIVED.value: [State.COST_VALIDATED, State.FAILED],
        State.COST_VALIDATED.value: [State.ORDER_SUBMITTED, State.FAILED],
        State.ORDER_SUBMITTED.value: [State.SHIPPED, State.FAILED],
    }
    TERMINAL_STATES = (State.SHIPPED, State.FAILED)

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shipment_attempts",
    )
    invoice_reference = models.CharField(max_length=255, blank=True)
    payments_count = models.PositiveIntegerField(default=0)
    state = models.CharField(
        max_length=20,
        choices=State.choices,
        default=State.IDLE,
        db_index=True,
    )
    items = models.JSONField(
        default=list,
        blank=True,
        help_text="Planned items: [{product_id, quantity}]",
    )
    mode = models.CharField(max_length=10, blank=True)
    shipping_description = models.CharField(max_length=255, blank=True)
    shipping_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    vendor_order_id = models.CharField(max_length=100, blank=True)

    error_kind = models.CharField(max_length=20, blank=True)
    error_code = models.CharField(max_length=100, blank=True)
    error_message = models.TextField(blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["customer", "state"], name="fulfil_attempt_cust_state_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_reference or self.pk} ({self.state})"

    @property
    def is_terminal(self) -> bool:
        return self.state in self.TERMINAL_STATES

    def can_transition_to(self, to_state: str) -> bool:
        return to_state in self.TRANSITIONS.get(self.state, [])
