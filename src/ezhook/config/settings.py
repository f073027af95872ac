"""
Module: settings.py
Description: Library configuration using pydantic-settings.

Loads delivery defaults (retry policy, timeout, log level) from
EZHOOK_* environment variables with validation. Supports .env files
for local development.
"""

from typing import TYPE_CHECKING, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ezhook.delivery.retry import RetryPolicy


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EZHOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Automatic re-attempts after the first delivery attempt"
    )
    base_delay_ms: float = Field(
        default=1000,
        gt=0,
        description="Base backoff delay in milliseconds"
    )
    max_delay_ms: float = Field(
        default=60000,
        gt=0,
        description="Upper bound for the computed backoff delay in milliseconds"
    )

    # HTTP settings
    timeout_ms: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-attempt timeout in milliseconds"
    )
    user_agent: str = Field(
        default="ezhook (https://github.com/ezhook/ezhook, 0.3.0)",
        description="User-Agent header sent with every request"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    def retry_policy(self) -> "RetryPolicy":
        """Build the RetryPolicy described by these settings."""
        from ezhook.delivery.retry import RetryPolicy

        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms
        )


# Global settings instance
settings = Settings()
