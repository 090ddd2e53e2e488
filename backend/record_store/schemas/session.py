"""Pydantic schemas for login sessions."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from record_store.schemas.token import as_utc


class SessionCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=512)
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def _normalize_expiry(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


class SessionRead(SessionCreate):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
