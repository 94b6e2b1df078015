"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE (community alias store)
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL (alias store disabled when unset)"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key"
    )

    # ===================
    # SMART PASTE
    # ===================
    community_alias_min_usage: int = Field(
        default=3,
        ge=1,
        description="Minimum usage count before a community alias is used"
    )
    alias_index_cache_size: int = Field(
        default=32,
        ge=1,
        le=1024,
        description="Number of alias indexes memoized per process"
    )

    # ===================
    # TEXT ACQUISITION
    # ===================
    enable_ocr: bool = Field(
        default=False,
        description="Allow OCR of uploaded images (needs tesseract installed)"
    )
    ocr_language: str = Field(
        default="eng",
        description="Tesseract language code(s), e.g. 'eng' or 'eng+deu'"
    )
    product_page_proxy_url: Optional[str] = Field(
        None,
        description="URL of the fetch-product-page proxy function"
    )
    http_timeout_seconds: float = Field(
        default=15,
        gt=0,
        le=120,
        description="Timeout for product page fetches"
    )
    max_pdf_pages: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Pages read from an uploaded PDF"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def alias_store_configured(self) -> bool:
        """Check if the community alias store can be reached."""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
