"""Application configuration using Pydantic Settings.

Every field can be overridden with a ``STOCKFLOW_``-prefixed
environment variable or a ``.env`` file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="STOCKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Path("data")
    log_level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    # Optimistic concurrency
    max_conflict_retries: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=0.05, ge=0)
    lock_timeout_seconds: float = Field(default=5.0, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
