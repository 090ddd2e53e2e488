"""Pydantic schemas for refresh and password-reset tokens."""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from record_store.schemas.user import UserRead


def as_utc(value: datetime) -> datetime:
    """Normalize to UTC; SQLite keeps only the wall-clock part."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TokenBase(BaseModel):
    token: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _normalize_expiry(cls, value: datetime) -> datetime:
        return as_utc(value)


class RefreshTokenCreate(TokenBase):
    pass


class RefreshTokenRead(TokenBase):
    id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RefreshTokenWithUser(RefreshTokenRead):
    user: UserRead


class PasswordResetTokenCreate(TokenBase):
    token: str = Field(..., min_length=1, max_length=255)


class PasswordResetTokenRead(TokenBase):
    id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
