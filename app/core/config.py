# app/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (PostgreSQL in production, sqlite:// for local runs)
      - JWT_SECRET (signing secret for admin bearer tokens)

    Optional integrations (left unset => the integration is skipped):
      - TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID
      - GOOGLE_SHEETS_ID / GOOGLE_SERVICE_ACCOUNT_EMAIL / GOOGLE_PRIVATE_KEY
        (worksheet tabs: GOOGLE_ORDERS_SHEET / GOOGLE_CONTACTS_SHEET)
      - CLICK_SERVICE_ID / CLICK_AUTH_TOKEN
      - PAYME_MERCHANT_ID
    """

    PROJECT_NAME: str = "Paket UZB Backend"
    API_PREFIX: str = "/api"

    # development | production | test
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DATABASE_SSL: bool = False

    # Admin JWT verification
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Orders
    ORDER_NUMBER_PREFIX: str = "PKT"
    ORDER_NUMBER_MAX_ATTEMPTS: int = 5
    DEFAULT_DELIVERY_COST: float = 50000
    ORDER_STRICT_TRANSITIONS: bool = True

    # Telegram notifications
    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_CHAT_ID: str | None = None
    ADMIN_URL: str = "Admin panel"

    # Google Sheets logging
    GOOGLE_SHEETS_ID: str | None = None
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str | None = None
    GOOGLE_PRIVATE_KEY: str | None = None
    GOOGLE_ORDERS_SHEET: str = "Buyurtmalar"
    GOOGLE_CONTACTS_SHEET: str = "Murojaatlar"

    # Payment providers
    CLICK_SERVICE_ID: str | None = None
    CLICK_AUTH_TOKEN: str | None = None
    CLICK_API_URL: str = "https://api.click.uz/v2/merchant/invoice/create"
    PAYME_MERCHANT_ID: str | None = None
    PAYME_CHECKOUT_URL: str = "https://checkout.paycom.uz"
    FRONTEND_URL: str = "http://localhost:3000"

    SEED_SAMPLE_PRODUCTS: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
