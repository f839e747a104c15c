"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from src.core.config import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "APP_CATALOG_SERVICE_URL",
        "PRODUCT_SERVICE_URL",
        "APP_DATABASE_URL",
        "APP_ENFORCE_STATUS_TRANSITIONS",
        "APP_CATALOG_TIMEOUT_SECONDS",
        "APP_ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestCatalogSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.catalog_service_url == "http://product-service:3001"
        assert settings.catalog_timeout_seconds == 5.0
        assert settings.enforce_status_transitions is False

    def test_prefixed_variable(self, monkeypatch):
        monkeypatch.setenv("APP_CATALOG_SERVICE_URL", "https://catalog.internal")

        assert Settings(_env_file=None).catalog_service_url == "https://catalog.internal"

    def test_legacy_variable_is_accepted(self, monkeypatch):
        monkeypatch.setenv("PRODUCT_SERVICE_URL", "http://catalog:9000/")

        assert Settings(_env_file=None).catalog_service_url == "http://catalog:9000"

    def test_prefixed_variable_wins_over_legacy(self, monkeypatch):
        monkeypatch.setenv("APP_CATALOG_SERVICE_URL", "http://new:1")
        monkeypatch.setenv("PRODUCT_SERVICE_URL", "http://old:2")

        assert Settings(_env_file=None).catalog_service_url == "http://new:1"

    def test_rejects_non_http_url(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, catalog_service_url="ftp://catalog")

    @pytest.mark.parametrize("timeout", [0, -1, 61])
    def test_rejects_out_of_range_timeout(self, timeout):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, catalog_timeout_seconds=timeout)


class TestGeneralSettings:
    def test_enforcement_from_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENFORCE_STATUS_TRANSITIONS", "true")

        assert Settings(_env_file=None).enforce_status_transitions is True

    def test_rejects_non_postgres_database(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, database_url="mysql://localhost/orders")

    def test_cors_origins_from_comma_separated_string(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")

        assert settings.cors_origins == ["http://a.test", "http://b.test"]

    def test_environment_helpers(self):
        assert Settings(_env_file=None, environment="production").is_production
        assert Settings(_env_file=None).is_development
