"""Tests for django-fulfillment configuration."""

import pytest

from django_fulfillment.conf import DEFAULTS, get_country_lookup, get_setting, load_callable
from django_fulfillment.countries import iso_country_title


class TestGetSetting:

    def test_default(self):
        assert get_setting("REQUEST_TIMEOUT") == 30.0
        assert get_setting("INVENTORY_RETRIES") == DEFAULTS["INVENTORY_RETRIES"]

    def test_override(self, settings):
        settings.FULFILLMENT_REQUEST_TIMEOUT = 10

        assert get_setting("REQUEST_TIMEOUT") == 10

    def test_explicit_default(self):
        assert get_setting("UNKNOWN", "fallback") == "fallback"


class TestLoadCallable:

    def test_default_country_lookup(self):
        assert get_country_lookup() is iso_country_title

    def test_invalid_path(self):
        with pytest.raises(ImportError):
            load_callable("nodots")

    def test_missing_attribute(self):
        with pytest.raises(ImportError):
            load_callable("django_fulfillment.countries.no_such_lookup")

    def test_not_callable(self):
        with pytest.raises(ImportError):
            load_callable("django_fulfillment.countries.SUPPORTED_COUNTRIES")
