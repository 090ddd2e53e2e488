"""HTTP client for the record store.

Every call returns a :class:`StoreResult` instead of raising, so callers decide
per operation which failure kinds matter. ``unwrap()`` turns a failure into an
:class:`AuthServiceError` when the caller only wants to propagate it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, TypeVar
from urllib.parse import quote

import httpx
from fastapi import status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from auth_service.core.config import Settings
from auth_service.core.errors import AuthServiceError, ErrorKind
from auth_service.schemas.records import (
    PasswordResetTokenRecord,
    RefreshTokenRecord,
    SessionRecord,
    UserPublic,
    UserRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_KIND_BY_STATUS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
}


@dataclass(slots=True, frozen=True)
class StoreFailure:
    kind: ErrorKind
    message: str
    status_code: int

    def to_error(self) -> AuthServiceError:
        return AuthServiceError(self.kind, self.message, self.status_code)


@dataclass(slots=True)
class StoreResult(Generic[T]):
    value: T | None = None
    failure: StoreFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.failure.kind if self.failure else None

    def unwrap(self) -> T:
        if self.failure is not None:
            raise self.failure.to_error()
        return self.value  # type: ignore[return-value]


def _detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, str):
            return detail
    return None


def _segment(value: str) -> str:
    return quote(value, safe="")


class RecordStoreClient:
    """Async client for the record store REST API."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordStoreClient":
        http = httpx.AsyncClient(
            base_url=settings.record_store_url,
            timeout=httpx.Timeout(settings.record_store_timeout_seconds),
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        default_message: str,
        parse: Callable[[Any], T] | None = None,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> StoreResult[T]:
        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Record store %s %s failed: %s", method, path, exc)
            return StoreResult(
                failure=StoreFailure(ErrorKind.UPSTREAM, default_message, status.HTTP_500_INTERNAL_SERVER_ERROR)
            )

        if response.status_code >= 400:
            kind = _KIND_BY_STATUS.get(response.status_code, ErrorKind.UPSTREAM)
            message = _detail(response) or default_message
            if kind is ErrorKind.UPSTREAM:
                logger.warning("Record store %s %s returned %s: %s", method, path, response.status_code, message)
            return StoreResult(failure=StoreFailure(kind, message, response.status_code))

        if parse is None or response.status_code == status.HTTP_204_NO_CONTENT:
            return StoreResult()
        try:
            return StoreResult(value=parse(response.json()))
        except (ValueError, ValidationError) as exc:
            logger.error("Malformed record store response for %s %s: %s", method, path, exc)
            return StoreResult(
                failure=StoreFailure(ErrorKind.UPSTREAM, default_message, status.HTTP_500_INTERNAL_SERVER_ERROR)
            )

    @staticmethod
    def _absent_is_none(result: StoreResult[T]) -> StoreResult[T | None]:
        if result.kind is ErrorKind.NOT_FOUND:
            return StoreResult(value=None)
        return result

    @staticmethod
    def _absent_is_ok(result: StoreResult[None]) -> StoreResult[None]:
        if result.kind is ErrorKind.NOT_FOUND:
            return StoreResult()
        return result

    # Users

    async def create_user(
        self,
        email: str,
        password_hash: str | None = None,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        github_id: str | None = None,
        avatar: str | None = None,
        email_verified: bool | None = None,
        role: str | None = None,
    ) -> StoreResult[UserPublic]:
        payload = {
            "email": email,
            "password_hash": password_hash,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "github_id": github_id,
            "avatar": avatar,
            "email_verified": email_verified,
            "role": role,
        }
        payload = {key: value for key, value in payload.items() if value is not None}
        return await self._request(
            "POST", "/users", "Failed to create user", UserPublic.model_validate, json=payload
        )

    async def find_user_by_email(self, email: str) -> StoreResult[UserRecord]:
        return await self._request(
            "GET", "/users/by-email", "User not found", UserRecord.model_validate, params={"email": email}
        )

    async def find_user_by_id(self, user_id: str) -> StoreResult[UserPublic]:
        return await self._request(
            "GET", f"/users/{_segment(user_id)}", "User not found", UserPublic.model_validate
        )

    async def find_user_by_id_with_hash(self, user_id: str) -> StoreResult[UserRecord]:
        return await self._request(
            "GET", f"/users/{_segment(user_id)}/with-password", "User not found", UserRecord.model_validate
        )

    async def find_user_by_external_id(self, github_id: str) -> StoreResult[UserRecord | None]:
        result = await self._request(
            "GET", "/users/by-github", "User not found", UserRecord.model_validate, params={"github_id": github_id}
        )
        return self._absent_is_none(result)

    async def update_user(self, user_id: str, **fields: Any) -> StoreResult[UserPublic]:
        return await self._request(
            "PATCH",
            f"/users/{_segment(user_id)}",
            "Failed to update user",
            UserPublic.model_validate,
            json=jsonable_encoder(fields),
        )

    async def delete_user(self, user_id: str) -> StoreResult[None]:
        return await self._request("DELETE", f"/users/{_segment(user_id)}", "Failed to delete user")

    # Refresh tokens

    async def create_refresh_token(self, token: str, user_id: str, expires_at: datetime) -> StoreResult[RefreshTokenRecord]:
        payload = jsonable_encoder({"token": token, "user_id": user_id, "expires_at": expires_at})
        return await self._request(
            "POST", "/refresh-tokens", "Failed to create refresh token", RefreshTokenRecord.model_validate, json=payload
        )

    async def find_refresh_token(self, token: str) -> StoreResult[RefreshTokenRecord | None]:
        result = await self._request(
            "GET", f"/refresh-tokens/{_segment(token)}", "Refresh token not found", RefreshTokenRecord.model_validate
        )
        return self._absent_is_none(result)

    async def delete_refresh_token(self, token: str) -> StoreResult[None]:
        result = await self._request("DELETE", f"/refresh-tokens/{_segment(token)}", "Failed to delete refresh token")
        return self._absent_is_ok(result)

    async def delete_user_refresh_tokens(self, user_id: str) -> StoreResult[None]:
        result = await self._request(
            "DELETE", f"/refresh-tokens/user/{_segment(user_id)}", "Failed to delete refresh tokens"
        )
        return self._absent_is_ok(result)

    # Sessions

    async def create_session(
        self,
        user_id: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        expires_at: datetime | None = None,
    ) -> StoreResult[SessionRecord]:
        payload = jsonable_encoder(
            {"user_id": user_id, "ip_address": ip_address, "user_agent": user_agent, "expires_at": expires_at}
        )
        return await self._request(
            "POST", "/sessions", "Failed to create session", SessionRecord.model_validate, json=payload
        )

    async def delete_user_sessions(self, user_id: str) -> StoreResult[None]:
        result = await self._request("DELETE", f"/sessions/user/{_segment(user_id)}", "Failed to delete sessions")
        return self._absent_is_ok(result)

    # Password reset tokens

    async def create_password_reset_token(
        self, token: str, user_id: str, expires_at: datetime
    ) -> StoreResult[PasswordResetTokenRecord]:
        payload = jsonable_encoder({"token": token, "user_id": user_id, "expires_at": expires_at})
        return await self._request(
            "POST",
            "/password-reset-tokens",
            "Failed to create password reset token",
            PasswordResetTokenRecord.model_validate,
            json=payload,
        )

    async def find_password_reset_token(self, token: str) -> StoreResult[PasswordResetTokenRecord | None]:
        result = await self._request(
            "GET",
            f"/password-reset-tokens/{_segment(token)}",
            "Password reset token not found",
            PasswordResetTokenRecord.model_validate,
        )
        return self._absent_is_none(result)

    async def delete_password_reset_token(self, token: str) -> StoreResult[None]:
        result = await self._request(
            "DELETE", f"/password-reset-tokens/{_segment(token)}", "Failed to delete password reset token"
        )
        return self._absent_is_ok(result)
