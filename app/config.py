"""
Configuration settings for the payment service.

Values come from the environment, falling back to the project's ``.env`` file.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",  # Ignore unrelated keys in .env
        frozen=True,
    )

    # Database
    database_url: str

    # Stripe
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_timeout_seconds: float = 10.0
    webhook_tolerance_seconds: int = 300

    # Checkout
    checkout_currency: str = "eur"
    checkout_success_url: str = "http://localhost:8000/payments/success"
    checkout_cancel_url: str = "http://localhost:8000/payments/cancel"

    # Auth
    jwt_secret: Optional[str] = None

    log_level: str = "INFO"

    @field_validator("checkout_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process and shared through dependencies."""
    return Settings()
