"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./datacompliance.db"
    DATABASE_ECHO: bool = False

    # Holds
    settlement_hold_days: int = 90
    """Days a settled subscription blocks deletion (payment dispute window).

    Values below 1 disable the hold.
    """

    # Store access
    store_timeout_seconds: float = Field(default=30.0, gt=0)
    """Upper bound for every adapter and audit store call."""

    export_concurrency: int = Field(default=4, ge=1)
    """Maximum number of adapters exported in parallel."""

    # Observability
    metrics_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
