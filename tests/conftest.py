"""Shared fixtures for django-fulfillment tests."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from django_fulfillment.snapshots import InvoiceSnapshot, LineItemSnapshot, ShippingAddress
from tests.helpers import plan_data


@pytest.fixture(autouse=True)
def no_vendor_env(monkeypatch):
    """Keep credentials from the developer's environment out of tests."""
    monkeypatch.delenv("FULFILLMENT_USER_ID", raising=False)
    monkeypatch.delenv("FULFILLMENT_PASSWORD", raising=False)


@pytest.fixture
def user(django_user_model):
    """Create a test customer."""
    return django_user_model.objects.create_user(username='customer', password='test')


@pytest.fixture
def fulfillment_settings(db):
    """Configured vendor account with admin alerts on."""
    from django_fulfillment.models import FulfillmentSettings

    config = FulfillmentSettings.get_instance()
    config.user_id = 'shop@example.com'
    config.password = 'secret'
    config.warn_admin = True
    config.admin_email = 'admin@example.com'
    config.max_shipping_cost = Decimal('0')
    config.save()
    return config


@pytest.fixture
def address():
    return ShippingAddress(
        first_name='Jane',
        last_name='Doe',
        street='1 Main St',
        city='Springfield',
        state='IL',
        zip='62701',
        country='US',
    )


@pytest.fixture
def make_invoice(user, address):
    """Build an InvoiceSnapshot with one line per schedule given."""

    def _make(*schedules, payments_count=1, customer=None, address=address,
              quantity=1, always_ship=False, reference='INV-1'):
        items = tuple(
            LineItemSnapshot(
                description=f'Plan {i + 1}',
                quantity=quantity,
                plan_data=plan_data(schedule, always_ship=always_ship),
            )
            for i, schedule in enumerate(schedules)
        )
        return InvoiceSnapshot(
            reference=reference,
            customer=customer or user,
            payments_count=payments_count,
            address=address,
            items=items,
        )

    return _make


@pytest.fixture
def vendor_post():
    """Patch the HTTP layer; set side_effect to a list of responses."""
    with patch('httpx.Client.post') as mock_post:
        yield mock_post
