"""Tests for django-fulfillment models."""

from decimal import Decimal

import pytest
from django.db import IntegrityError

from django_fulfillment.models import FulfillmentSettings, ShipmentAttempt, ShipmentHistory


@pytest.mark.django_db
class TestFulfillmentSettings:
    """Tests for the settings singleton."""

    def test_get_instance_creates_defaults(self):
        config = FulfillmentSettings.get_instance()

        assert config.pk == 1
        assert config.no_ship is False
        assert config.max_shipping_cost == Decimal("0")
        assert config.check_inventory is False
        assert config.warn_admin is False

    def test_single_row(self):
        FulfillmentSettings(user_id="a").save()
        FulfillmentSettings(user_id="b").save()

        assert FulfillmentSettings.objects.count() == 1
        assert FulfillmentSettings.get_instance().user_id == "b"

    def test_cannot_delete(self):
        config = FulfillmentSettings.get_instance()

        with pytest.raises(IntegrityError):
            config.delete()

    def test_not_configured_by_default(self):
        assert FulfillmentSettings.get_instance().is_configured() is False

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("FULFILLMENT_USER_ID", "env@example.com")
        monkeypatch.setenv("FULFILLMENT_PASSWORD", "env-secret")

        config = FulfillmentSettings.get_instance()

        assert config.vendor_user_id == "env@example.com"
        assert config.vendor_password == "env-secret"
        assert config.is_configured()

    def test_database_value_wins(self, monkeypatch):
        monkeypatch.setenv("FULFILLMENT_USER_ID", "env@example.com")
        config = FulfillmentSettings.get_instance()
        config.user_id = "db@example.com"
        config.save()

        assert config.vendor_user_id == "db@example.com"

    def test_str(self):
        config = FulfillmentSettings.get_instance()
        config.no_ship = True

        assert str(config) == "FulfillmentSettings (TEST)"


@pytest.mark.django_db
class TestShipmentHistory:

    def test_add_products_dedupes_in_order(self, user):
        history = ShipmentHistory.objects.create(customer=user, shipped_products="A,B")

        history.add_products(["C", "A", "D", "C"])

        assert history.shipped_products == "A,B,C,D"
        assert history.product_ids == {"A", "B", "C", "D"}

    def test_hand_edited_value(self, user):
        history = ShipmentHistory(customer=user, shipped_products=" A , ,B,")

        assert history.product_ids == {"A", "B"}

    def test_related_name(self, user):
        ShipmentHistory.objects.create(customer=user)

        assert user.shipment_history.product_ids == set()


@pytest.mark.django_db
class TestShipmentAttempt:

    def test_defaults(self):
        attempt = ShipmentAttempt.objects.create()

        assert attempt.state == ShipmentAttempt.State.IDLE
        assert attempt.items == []
        assert not attempt.is_terminal

    @pytest.mark.parametrize("state", [
        ShipmentAttempt.State.IDLE,
        ShipmentAttempt.State.QUOTE_REQUESTED,
        ShipmentAttempt.State.QUOTE_RECEIVED,
        ShipmentAttempt.State.COST_VALIDATED,
        ShipmentAttempt.State.ORDER_SUBMITTED,
    ])
    def test_any_live_state_can_fail(self, state):
        attempt = ShipmentAttempt(state=state)

        assert attempt.can_transition_to(ShipmentAttempt.State.FAILED)

    def test_cannot_skip_states(self):
        attempt = ShipmentAttempt(state=ShipmentAttempt.State.QUOTE_RECEIVED)

        assert not attempt.can_transition_to(ShipmentAttempt.State.ORDER_SUBMITTED)
        assert not attempt.can_transition_to(ShipmentAttempt.State.SHIPPED)

    @pytest.mark.parametrize("state", [
        ShipmentAttempt.State.SHIPPED,
        ShipmentAttempt.State.FAILED,
    ])
    def test_terminal_states(self, state):
        attempt = ShipmentAttempt(state=state)

        assert attempt.is_terminal
        assert not attempt.can_transition_to(ShipmentAttempt.State.FAILED)
