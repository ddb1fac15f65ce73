"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for retry execution and logging,
read from environment variables and an optional ``.env`` file.

Example:
    >>> from retrykit.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.retry_limit
    3
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RETRYKIT_RETRY_RETRY_LIMIT=5
    # RETRYKIT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_RETRY_",
        extra="ignore",
    )

    retry_limit: Annotated[int, Field(ge=0)] = 3
    initial_delay: NonNegativeFloat = Field(default=0.0, description="Delay before the first attempt in seconds")
    fixed_interval: PositiveFloat = Field(default=1.0, description="Interval of the default fixed backoff")
    use_jitter: bool = False
    jitter_ceiling: PositiveFloat = Field(default=1.0, description="Upper bound (exclusive) of the jitter wait")
    max_wait: NonNegativeFloat = Field(default=0.0, description="Overall deadline in seconds, 0 = unbounded")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrykitSettings(BaseSettings):
    """Root settings for retrykit.

    Loads configuration from environment variables with RETRYKIT_ prefix.

    Example environment variables:
        RETRYKIT_RETRY_MAX_WAIT=30
        RETRYKIT_RETRY_USE_JITTER=true
        RETRYKIT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrykitSettings:
    """Get the global settings instance (cached)."""
    return RetrykitSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
