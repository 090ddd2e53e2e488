"""Shapes of the records returned by the record store."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

ACTIVE_STATUS = "ACTIVE"


class UserPublic(BaseModel):
    """User as exposed outside the trust boundary, without the password hash."""

    id: str
    email: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    github_id: str | None = None
    role: str = "USER"
    status: str = ACTIVE_STATUS
    email_verified: bool = False
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS


class UserRecord(UserPublic):
    password_hash: str | None = None

    def public(self) -> UserPublic:
        return UserPublic.model_validate(self.model_dump(exclude={"password_hash"}))


class RefreshTokenRecord(BaseModel):
    id: str
    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime | None = None
    user: UserPublic | None = None

    model_config = ConfigDict(extra="ignore")


class PasswordResetTokenRecord(BaseModel):
    id: str
    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")


class SessionRecord(BaseModel):
    id: str
    user_id: str
    ip_address: str | None = None
    user_agent: str | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")
