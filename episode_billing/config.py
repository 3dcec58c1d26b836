"""Application configuration loaded from the environment (and an optional .env)."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Episode Billing API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Document store
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "episode_billing"

    # Auth: an empty key leaves write endpoints open (local single-operator mode)
    API_KEY: Optional[str] = None

    # CORS, comma separated; "*" allows any origin
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8501"

    # Payments
    STRIPE_SECRET_KEY: Optional[str] = None
    CURRENCY: str = "usd"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    VENMO_URL: Optional[str] = None
    PAYPAL_URL: Optional[str] = None

    # Invoice header
    BUSINESS_NAME: str = "Aurora Media LLC"
    BUSINESS_ADDRESS: List[str] = ["492 Gates Ave #4B", "Brooklyn, NY 11216"]
    BUSINESS_PHONE: Optional[str] = None

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def pay_page_base(self) -> str:
        return self.PUBLIC_BASE_URL.rstrip("/") + "/pay"


@lru_cache
def get_settings() -> Settings:
    return Settings()
