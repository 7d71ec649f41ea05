"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates required fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hcd.types import CachePolicy, Region


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Required:
        HCD_API_KEY: Stack API key
        HCD_DELIVERY_TOKEN: Delivery token for the environment
        HCD_ENVIRONMENT: Publishing environment name

    Optional:
        HCD_REGION: Hosting region (us, eu, azure-na, azure-eu, gcp-na)
        HCD_HOST: Explicit API host, overrides the region
        HCD_BRANCH: Branch to read from
        HCD_LOCALE: Default locale for every request
        CACHE_POLICY: Cache policy applied to every read
        CACHE_MAX_AGE: Time-to-live of cache writes, in seconds
        CACHE_STORE: Persistence store backend (memory or sqlite)
        CACHE_DIR: Directory for the sqlite store
        HTTP_TIMEOUT: Transport timeout in seconds
        MAX_RETRIES: Attempts per request before giving up
        RETRY_DELAY: Base delay of the exponential backoff, in seconds
        LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required - stack identification
    HCD_API_KEY: str = Field(..., description="Stack API key")
    HCD_DELIVERY_TOKEN: str = Field(..., description="Delivery token")
    HCD_ENVIRONMENT: str = Field(..., description="Publishing environment")

    # Host resolution
    HCD_REGION: Region = Field(default=Region.US, description="Hosting region")
    HCD_HOST: str | None = Field(default=None, description="Explicit API host")
    HCD_BRANCH: str | None = Field(default=None, description="Branch to read from")
    HCD_LOCALE: str | None = Field(default=None, description="Default locale")

    # Cache
    CACHE_POLICY: CachePolicy = Field(
        default=CachePolicy.IGNORE_CACHE, description="Cache policy for reads"
    )
    CACHE_MAX_AGE: int = Field(
        default=60 * 60 * 24, ge=1, description="Cache time-to-live in seconds"
    )
    CACHE_STORE: Literal["memory", "sqlite"] = Field(
        default="memory", description="Persistence store backend"
    )
    CACHE_DIR: Path = Field(default=Path(".cache"), description="Cache directory")

    # Transport
    HTTP_TIMEOUT: float = Field(default=30.0, gt=0.0, description="Timeout in seconds")
    MAX_RETRIES: int = Field(default=5, ge=1, le=10, description="Attempts per request")
    RETRY_DELAY: float = Field(
        default=0.3, ge=0.0, description="Base backoff delay in seconds"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @field_validator("HCD_API_KEY", "HCD_DELIVERY_TOKEN", "HCD_ENVIRONMENT")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty stack credentials."""
        if not v.strip():
            raise ValueError("stack credentials must not be blank")
        return v.strip()

    @property
    def api_key(self) -> str:
        """Get API key (lowercase alias)."""
        return self.HCD_API_KEY

    @property
    def delivery_token(self) -> str:
        """Get delivery token (lowercase alias)."""
        return self.HCD_DELIVERY_TOKEN

    @property
    def environment(self) -> str:
        """Get environment (lowercase alias)."""
        return self.HCD_ENVIRONMENT

    @property
    def caching_enabled(self) -> bool:
        return self.CACHE_POLICY is not CachePolicy.IGNORE_CACHE

    def ensure_directories(self) -> None:
        """Create the cache directory if it doesn't exist."""
        self.CACHE_DIR.mkdir(parents=True, exist_ok=True)

    def redacted_display(self) -> dict[str, str | int | float | None]:
        """Return settings with secrets redacted for display."""
        def redact(value: str | None) -> str | None:
            if value is None:
                return None
            return f"{value[:4]}...{value[-4:]}" if len(value) > 12 else "***"

        return {
            "HCD_API_KEY": redact(self.HCD_API_KEY),
            "HCD_DELIVERY_TOKEN": redact(self.HCD_DELIVERY_TOKEN),
            "HCD_ENVIRONMENT": self.HCD_ENVIRONMENT,
            "HCD_REGION": self.HCD_REGION.value,
            "HCD_HOST": self.HCD_HOST,
            "HCD_BRANCH": self.HCD_BRANCH,
            "HCD_LOCALE": self.HCD_LOCALE,
            "CACHE_POLICY": self.CACHE_POLICY.value,
            "CACHE_MAX_AGE": self.CACHE_MAX_AGE,
            "CACHE_STORE": self.CACHE_STORE,
            "CACHE_DIR": str(self.CACHE_DIR),
            "HTTP_TIMEOUT": self.HTTP_TIMEOUT,
            "MAX_RETRIES": self.MAX_RETRIES,
            "RETRY_DELAY": self.RETRY_DELAY,
            "LOG_LEVEL": self.LOG_LEVEL,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
