"""Storefront Client Configuration"""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Commerce API
    api_base_url: str = "http://localhost:3000/api"
    request_timeout: float = 30.0

    # Cart persistence
    cart_store_path: Path = Path.home() / ".storefront" / "carts.json"

    # Seconds to wait before re-fetching an order whose payment outcome is unknown
    pay_reverify_delay: float = 1.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
