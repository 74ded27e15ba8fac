from __future__ import annotations

import pytest

from core import settings as settings_module

_MANAGED_VARS = (
    "MERCADOPAGO_ACCESS_TOKEN",
    "MERCADOPAGO_API_URL",
    "MERCADOPAGO_TIMEOUT_SECONDS",
    "BACKEND_URL",
    "FRONTEND_URL",
    "CORS_ORIGINS",
    "PORT",
    "ENV",
    "DEBUG_INCLUDE_ERROR_DETAILS",
    "ORDER_LABEL",
    "EXTERNAL_REFERENCE_PREFIX",
    "ENFORCE_ORDER_TOTAL",
)


@pytest.fixture(autouse=True)
def _fresh_settings():
    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


def _set_minimal_valid_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _MANAGED_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MERCADOPAGO_ACCESS_TOKEN", "TEST-1234567890-abcdef")


def test_missing_access_token_is_reported(monkeypatch: pytest.MonkeyPatch):
    _set_minimal_valid_env(monkeypatch)
    monkeypatch.delenv("MERCADOPAGO_ACCESS_TOKEN", raising=False)

    missing = settings_module.collect_missing_required_env_vars()

    assert missing == ["MERCADOPAGO_ACCESS_TOKEN"]


def test_blank_access_token_counts_as_missing(monkeypatch: pytest.MonkeyPatch):
    _set_minimal_valid_env(monkeypatch)
    monkeypatch.setenv("MERCADOPAGO_ACCESS_TOKEN", "   ")

    with pytest.raises(RuntimeError) as exc_info:
        settings_module.get_settings()

    assert "- MERCADOPAGO_ACCESS_TOKEN" in str(exc_info.value)


def test_validate_required_environment_raises_with_missing_and_invalid_values(
    monkeypatch: pytest.MonkeyPatch,
):
    _set_minimal_valid_env(monkeypatch)
    monkeypatch.delenv("MERCADOPAGO_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("PORT", "not-a-number")
    monkeypatch.setenv("MERCADOPAGO_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("BACKEND_URL", "backend.example.com")

    with pytest.raises(RuntimeError) as exc_info:
        settings_module.validate_required_environment()

    message = str(exc_info.value)
    assert "Missing required environment variables" in message
    assert "- MERCADOPAGO_ACCESS_TOKEN" in message
    assert "Invalid environment values" in message
    assert "PORT must be a positive integer" in message
    assert "MERCADOPAGO_TIMEOUT_SECONDS must be a positive number" in message
    assert "BACKEND_URL must start with http:// or https://" in message


def test_defaults_apply_when_only_the_token_is_set(monkeypatch: pytest.MonkeyPatch):
    _set_minimal_valid_env(monkeypatch)

    settings = settings_module.get_settings()

    assert settings.env == "development"
    assert settings.port == 3000
    assert settings.backend_url is None
    assert settings.cors_origins == settings_module.DEFAULT_CORS_ORIGINS
    assert settings.mercadopago_timeout_seconds == 10.0
    assert settings.include_error_details is True
    assert settings.enforce_order_total is False
    assert settings.masked_access_token == "TEST-12345..."


def test_urls_are_normalized_and_frontend_joins_allowed_origins(monkeypatch: pytest.MonkeyPatch):
    _set_minimal_valid_env(monkeypatch)
    monkeypatch.setenv("BACKEND_URL", "https://backend.example.com/")
    monkeypatch.setenv("FRONTEND_URL", "https://shop.example.com/")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, http://127.0.0.1:5500")

    settings = settings_module.get_settings()

    assert settings.backend_url == "https://backend.example.com"
    assert settings.allowed_origins == (
        "http://localhost:3000",
        "http://127.0.0.1:5500",
        "https://shop.example.com",
    )


def test_production_hides_error_details(monkeypatch: pytest.MonkeyPatch):
    _set_minimal_valid_env(monkeypatch)
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DEBUG_INCLUDE_ERROR_DETAILS", "true")

    settings = settings_module.get_settings()

    assert settings.is_production
    assert settings.include_error_details is False
