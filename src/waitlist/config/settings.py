"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.

DATABASE_URL, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and RESEND_API_KEY
have no defaults: constructing Settings without them raises a
ValidationError naming every missing variable, so the process fails fast.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from waitlist.domain.validation import FieldLimits


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database configuration
    database_url: str
    pool_min_size: int = 2  # Minimum connections in pool
    pool_max_size: int = 10  # Maximum connections in pool

    # Managed auth (magic links, token verification)
    supabase_url: str
    supabase_service_role_key: str

    # Email delivery
    resend_api_key: str
    email_backend: Literal["resend", "console"] = "resend"
    email_from: str = "Serveqrew <notifications@serveqrew.org>"
    email_subject: str = "You're on the Serveqrew waitlist"

    http_timeout_seconds: float = 10.0

    # Links
    referral_base_url: str = "https://serveqrew.org"
    dashboard_url: str = "https://serveqrew.org/dashboard"

    # Signup field limits
    max_full_name_length: int = 50
    max_email_length: int = 200
    max_brand_name_length: int = 70

    # Rate limiting
    rate_limit_window_seconds: int = 120
    rate_limit_max_requests: int = 5

    # CORS
    cors_allow_origin: str = "*"
    cors_allow_headers: str = "content-type, authorization, apikey, x-client-info"

    log_level: str = "INFO"

    @property
    def field_limits(self) -> FieldLimits:
        return FieldLimits(
            full_name=self.max_full_name_length,
            email=self.max_email_length,
            brand_name=self.max_brand_name_length,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
