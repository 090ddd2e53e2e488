"""Request and response schemas for authentication endpoints."""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, EmailStr, Field, field_validator

from auth_service.schemas.records import UserPublic

PASSWORD_RULES = "Password must contain uppercase, lowercase, number and special character"


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    username: str | None = Field(default=None, min_length=3, max_length=30)
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)

    @field_validator("password")
    @classmethod
    def _check_strength(cls, value: str) -> str:
        has_upper = any(char.isupper() for char in value)
        has_lower = any(char.islower() for char in value)
        has_digit_or_symbol = any(not char.isalpha() for char in value)
        if not (has_upper and has_lower and has_digit_or_symbol):
            raise ValueError(PASSWORD_RULES)
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class DeleteAccountRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=255)
    new_password: str = Field(..., min_length=8, max_length=128)


class AuthResult(BaseModel):
    user: UserPublic
    access_token: str
    refresh_token: str


class MessageResponse(BaseModel):
    message: str


class PasswordResetRequested(MessageResponse):
    reset_link: str | None = None


@dataclass(slots=True, frozen=True)
class ExternalProfile:
    """Identity asserted by an external provider such as GitHub."""

    external_id: str
    email: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None


@dataclass(slots=True, frozen=True)
class ClientInfo:
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(slots=True, frozen=True)
class CurrentUser:
    user_id: str
    email: str
    role: str
