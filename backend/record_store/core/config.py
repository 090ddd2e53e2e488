"""Record store configuration and settings management."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Record store settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="RECORD_STORE_",
        extra="ignore",
    )

    app_name: str = "Record Store"

    # Database
    database_url: str = "sqlite+aiosqlite:///./record_store.db"

    # Expired token and session cleanup
    cleanup_enabled: bool = True
    cleanup_interval_seconds: int = 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
