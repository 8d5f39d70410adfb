"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Donation payments service configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Donation Payments API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Store (unset = payment tracking disabled)
    DATABASE_URL: Optional[str] = None
    REDIS_URL: Optional[str] = None

    CORS_ORIGINS: str = "http://localhost:3000"

    # Identity
    SECRET_KEY: str = ""
    BACKEND_JWT_SECRET: Optional[str] = None
    ALGORITHM: str = "HS256"

    # Donation methods
    DONATION_MODE: str = "hosted"
    BUY_ME_A_COFFEE_URL: Optional[str] = None
    PAYPAL_ME_URL: Optional[str] = None
    STRIPE_PAYMENT_LINK: Optional[str] = None

    # Webhook shared secrets
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    PAYPAL_WEBHOOK_ID: Optional[str] = None
    MPESA_WEBHOOK_SECRET: Optional[str] = None
    AIRTM_WEBHOOK_SECRET: Optional[str] = None
    BANK_TRANSFER_REFERENCE_SECRET: Optional[str] = None

    # Manual bank transfer display details
    BANK_NAME: str = ""
    BANK_ACCOUNT_NAME: str = ""
    BANK_ACCOUNT_NUMBER: str = ""
    BANK_SWIFT: str = ""
    BANK_REFERENCE_NOTE: str = "Use your email as transfer reference."

    PAYMENT_RATE_LIMIT: int = 30
    PAYMENT_RATE_WINDOW_SECONDS: int = 60

    def get_cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
