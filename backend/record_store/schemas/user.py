"""Pydantic schemas for user records."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from record_store.models.user import UserRole, UserStatus


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    first_name: str | None = Field(default=None, max_length=64)
    last_name: str | None = Field(default=None, max_length=64)
    avatar: str | None = Field(default=None, max_length=1024)


class UserCreate(UserBase):
    password_hash: str | None = Field(default=None, max_length=255)
    github_id: str | None = Field(default=None, max_length=64)
    email_verified: bool = False
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Partial update; only fields present in the payload are written."""

    email: str | None = Field(default=None, min_length=3, max_length=255)
    password_hash: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    first_name: str | None = Field(default=None, max_length=64)
    last_name: str | None = Field(default=None, max_length=64)
    avatar: str | None = Field(default=None, max_length=1024)
    github_id: str | None = Field(default=None, max_length=64)
    email_verified: bool | None = None
    role: UserRole | None = None
    status: UserStatus | None = None
    last_login_at: datetime | None = None


class UserRead(UserBase):
    id: str
    github_id: str | None = None
    role: UserRole
    status: UserStatus
    email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserWithHash(UserRead):
    password_hash: str | None = None


class UserPage(BaseModel):
    users: list[UserRead]
    total: int
    skip: int
    take: int
