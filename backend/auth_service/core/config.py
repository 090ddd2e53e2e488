"""Authentication service configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Authentication settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="AUTH_",
        extra="ignore",
    )

    app_name: str = "Authentication Service"

    # Token signing
    jwt_secret: str = "change-me"
    jwt_refresh_secret: str = "change-me-too"
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = "15m"
    jwt_refresh_expires_in: str = "7d"

    # Record store
    record_store_url: str = "http://localhost:3002/api"
    record_store_timeout_seconds: float = 5.0

    # Password reset
    frontend_url: str = "http://localhost:3000"
    password_reset_ttl_minutes: int = 60
    expose_reset_links: bool = False  # development only

    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""
    github_callback_url: str = "http://localhost:3001/api/auth/github/callback"
    github_scope: str = "user:email"
    oauth_state_max_age_seconds: int = 600

    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
