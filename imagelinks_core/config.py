"""Core Configuration"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from imagelinks_core.constants import (
    DEFAULT_SESSION_EXPIRY_SECONDS,
    DEFAULT_SWEEP_CONCURRENCY,
    MAX_SWEEP_CONCURRENCY,
    PROBE_TIMEOUT_SECONDS,
)


class StoreConfig(BaseSettings):
    """Key-value store configuration."""

    store_path: Path = Field(
        default=Path("data/imagelinks_store.json"),
        description="JSON file backing the key-value store",
    )

    @field_validator("store_path")
    @classmethod
    def validate_store_path(cls, v: Path) -> Path:
        if v.exists() and v.is_dir():
            raise ValueError(f"Store path points to a directory: {v}")
        return v


class AdminConfig(BaseSettings):
    """Administrator credentials and session settings."""

    admin_username: str = Field(default="admin")
    admin_password: SecretStr = Field(
        default=SecretStr(""),
        description="Administrator password; login is refused while unset",
    )
    session_expiry_seconds: int = Field(default=DEFAULT_SESSION_EXPIRY_SECONDS, ge=60)
    cookie_secure: bool = Field(default=True)


class SweepConfig(BaseSettings):
    """Liveness sweep settings."""

    probe_timeout: float = Field(default=PROBE_TIMEOUT_SECONDS, gt=0.0, le=60.0)
    # None keeps the unbounded one-worker-per-record fan-out
    sweep_max_concurrency: Optional[int] = Field(default=DEFAULT_SWEEP_CONCURRENCY, ge=1, le=MAX_SWEEP_CONCURRENCY)


class Settings(StoreConfig, AdminConfig, SweepConfig):
    """
    Complete application configuration.

    Environment variables (or a local .env file) take precedence over defaults.
    """

    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API server port")
    debug: bool = Field(default=False)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
