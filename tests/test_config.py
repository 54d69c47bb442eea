import pytest
from pydantic import ValidationError

from app.config import Settings


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CHECKOUT_CURRENCY", "USD")
    monkeypatch.setenv("STRIPE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.checkout_currency == "usd"
    assert settings.stripe_timeout_seconds == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.webhook_tolerance_seconds == 300


def test_bad_timeout_is_reported_by_name(monkeypatch):
    monkeypatch.setenv("STRIPE_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ValidationError) as excinfo:
        Settings(_env_file=None)

    assert "stripe_timeout_seconds" in str(excinfo.value)


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
