# listing_sync/core/config.py

import os
from functools import lru_cache
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # eBay OAuth
    EBAY_CLIENT_ID: str = ""
    EBAY_CLIENT_SECRET: str = ""
    EBAY_RU_NAME: str = ""
    EBAY_SANDBOX_CLIENT_ID: str = ""
    EBAY_SANDBOX_CLIENT_SECRET: str = ""
    EBAY_SANDBOX_RU_NAME: str = ""
    EBAY_SANDBOX_MODE: bool = False  # Change to True if in Sandbox test mode

    # eBay marketplace defaults
    EBAY_MARKETPLACE_ID: str = "EBAY_US"
    EBAY_CURRENCY: str = "USD"
    EBAY_CONTENT_LANGUAGE: str = "en-US"

    # Refresh the access token when it expires within this many minutes
    TOKEN_REFRESH_MARGIN_MINUTES: int = 30

    # Bulk sync backpressure (eBay rate limits)
    BULK_SYNC_BATCH_SIZE: int = 3
    BULK_SYNC_BATCH_PAUSE_SECONDS: float = 2.0

    # Public prefix for photo storage paths
    LISTING_PHOTO_BASE_URL: str = ""

    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def ebay_client_id(self) -> str:
        return self.EBAY_SANDBOX_CLIENT_ID if self.EBAY_SANDBOX_MODE else self.EBAY_CLIENT_ID

    @property
    def ebay_client_secret(self) -> str:
        return self.EBAY_SANDBOX_CLIENT_SECRET if self.EBAY_SANDBOX_MODE else self.EBAY_CLIENT_SECRET

    @property
    def ebay_ru_name(self) -> str:
        return self.EBAY_SANDBOX_RU_NAME if self.EBAY_SANDBOX_MODE else self.EBAY_RU_NAME

    @property
    def ebay_api_base(self) -> str:
        return "https://api.sandbox.ebay.com" if self.EBAY_SANDBOX_MODE else "https://api.ebay.com"

    @property
    def ebay_auth_base(self) -> str:
        return "https://auth.sandbox.ebay.com" if self.EBAY_SANDBOX_MODE else "https://auth.ebay.com"


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
