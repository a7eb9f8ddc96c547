# Generated manually for standalone django-fulfillment package

import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FulfillmentSettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "user_id",
                    models.CharField(
                        blank=True,
                        help_text="Vendor account user id, usually an email address",
                        max_length=255,
                    ),
                ),
                (
                    "password",
                    models.CharField(
                        blank=True,
                        help_text="Vendor account password",
                        max_length=255,
                    ),
                ),
                (
                    "no_ship",
                    models.BooleanField(
                        default=False,
                        help_text="Submit orders in TEST mode so the vendor does not process them",
                    ),
                ),
                (
                    "max_shipping_cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Reject orders whose cheapest shipping is above this (0 = no limit)",
                        max_digits=10,
                    ),
                ),
                (
                    "check_inventory",
                    models.BooleanField(
                        default=False,
                        help_text="Warn daily about products not ordered for 150+ days",
                    ),
                ),
                (
                    "warn_admin",
                    models.BooleanField(
                        default=False,
                        help_text="Email the admin when an order fails",
                    ),
                ),
                (
                    "admin_email",
                    models.EmailField(
                        blank=True,
                        help_text="Recipient for order alerts (defaults to FULFILLMENT_ADMIN_EMAIL)",
                        max_length=254,
                    ),
                ),
            ],
            options={
                "verbose_name": "Fulfillment Settings",
                "verbose_name_plural": "Fulfillment Settings",
            },
        ),
        migrations.CreateModel(
            name="StoredBlob",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.TextField(blank=True)),
                ("version", models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="ShipmentHistory",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "shipped_products",
                    models.TextField(
                        blank=True,
                        help_text="Comma-separated product ids already shipped to this customer",
                    ),
                ),
                (
                    "customer",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shipment_history",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "shipment history",
                "verbose_name_plural": "shipment histories",
            },
        ),
        migrations.CreateModel(
            name="ShipmentAttempt",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("invoice_reference", models.CharField(blank=True, max_length=255)),
                ("payments_count", models.PositiveIntegerField(default=0)),
                (
                    "state",
                    models.CharField(
                        choices=[
                            ("idle", "Idle"),
                            ("quote_requested", "Quote Requested"),
                            ("quote_received", "Quote Received"),
                            ("cost_validated", "Cost Validated"),
                            ("order_submitted", "Order Submitted"),
                            ("shipped", "Shipped"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="idle",
                        max_length=20,
                    ),
                ),
                (
                    "items",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Planned items: [{product_id, quantity}]",
                    ),
                ),
                ("mode", models.CharField(blank=True, max_length=10)),
                ("shipping_description", models.CharField(blank=True, max_length=255)),
                (
                    "shipping_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                ("vendor_order_id", models.CharField(blank=True, max_length=100)),
                ("error_kind", models.CharField(blank=True, max_length=20)),
                ("error_code", models.CharField(blank=True, max_length=100)),
                ("error_message", models.TextField(blank=True)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="shipment_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["customer", "state"],
                        name="fulfil_attempt_cust_state_idx",
                    ),
                ],
            },
        ),
    ]
