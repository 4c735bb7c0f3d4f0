"""Application settings using Pydantic. No side effects at import time."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.errors import ConfigurationError
from .constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RATE_LIMIT,
    DEFAULT_REQUEST_TIMEOUT,
    EU_BASE_URL,
    EU_BASE_URL_V4,
    MAX_RETRIES,
    US_BASE_URL,
    US_BASE_URL_V4,
)


class Settings(BaseSettings):
    """Exporter settings with validation.

    Settings are loaded from environment variables and .env file.
    No side effects at class definition time - .env is loaded only when
    Settings() is instantiated.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # === Mailgun API ===
    mailgun_api_key: str | None = None
    mailgun_domain: str | None = None
    mailgun_region: Literal["US", "EU"] = "US"

    # === Rate Limits ===
    rate_limit: Annotated[int, Field(gt=0, description="Requests per minute")] = DEFAULT_RATE_LIMIT
    max_concurrency: Annotated[int, Field(gt=0)] = DEFAULT_MAX_CONCURRENCY
    max_retries: Annotated[int, Field(ge=0)] = MAX_RETRIES
    retry_base_delay: Annotated[float, Field(ge=0)] = DEFAULT_BASE_DELAY
    request_timeout: Annotated[float, Field(gt=0)] = DEFAULT_REQUEST_TIMEOUT

    # === Export ===
    export_format: Literal["json", "csv", "both"] = "json"
    output_dir: Path = DEFAULT_OUTPUT_DIR
    date_from: str | None = None
    date_to: str | None = None

    debug: bool = False

    @field_validator("mailgun_region", mode="before")
    @classmethod
    def _upper_region(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("export_format", mode="before")
    @classmethod
    def _lower_format(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def base_url(self) -> str:
        """v3 API root for the configured region."""
        return EU_BASE_URL if self.mailgun_region == "EU" else US_BASE_URL

    @property
    def base_url_v4(self) -> str:
        """v4 API root (templates) for the configured region."""
        return EU_BASE_URL_V4 if self.mailgun_region == "EU" else US_BASE_URL_V4

    @property
    def has_credentials(self) -> bool:
        """Check if both API key and domain are configured."""
        return bool(self.mailgun_api_key and self.mailgun_domain)

    def require_credentials(self) -> None:
        """Fail fast when the API key or default domain is missing."""
        if not self.mailgun_api_key:
            raise ConfigurationError("MAILGUN_API_KEY is required")
        if not self.mailgun_domain:
            raise ConfigurationError("MAILGUN_DOMAIN is required")

    def masked_api_key(self) -> str:
        """API key with all but the last four characters hidden."""
        if not self.mailgun_api_key:
            return "Not set"
        return "***" + self.mailgun_api_key[-4:]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This is the recommended way to access settings to avoid
    repeated .env file parsing.
    """
    return Settings()
