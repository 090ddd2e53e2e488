"""Access/refresh token issuance and verification."""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt  # PyJWT

from auth_service.core.config import Settings
from auth_service.services.record_store import RecordStoreClient

DURATION_PATTERN = re.compile(r"^(\d+)([dhm])$")
DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)

_UNITS = {
    "d": "days",
    "h": "hours",
    "m": "minutes",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps coming back from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_duration(expression: str | None, default: timedelta = DEFAULT_REFRESH_TTL) -> timedelta:
    """Parse ``<integer><d|h|m>`` into a timedelta.

    Anything that does not match, including ``None``, yields ``default``.
    """
    match = DURATION_PATTERN.match((expression or "").strip())
    if not match:
        return default
    value, unit = match.groups()
    return timedelta(**{_UNITS[unit]: int(value)})


def expires_at(
    expression: str | None,
    reference: datetime | None = None,
    default: timedelta = DEFAULT_REFRESH_TTL,
) -> datetime:
    """Return ``reference`` (default: now) shifted by the parsed duration."""
    return (reference or utcnow()) + parse_duration(expression, default)


@dataclass(slots=True, frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Sign access/refresh token pairs and persist the refresh half."""

    def __init__(
        self,
        store: RecordStoreClient,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock

    @property
    def access_ttl(self) -> timedelta:
        return parse_duration(self._settings.jwt_expires_in, DEFAULT_ACCESS_TTL)

    @property
    def refresh_ttl(self) -> timedelta:
        return parse_duration(self._settings.jwt_refresh_expires_in, DEFAULT_REFRESH_TTL)

    def _sign(self, claims: dict[str, Any], secret: str, now: datetime, ttl: timedelta) -> str:
        payload = {
            **claims,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,  # keeps tokens issued in the same second distinct
        }
        return jwt.encode(payload, secret, algorithm=self._settings.jwt_algorithm)

    async def issue(self, user_id: str, email: str, role: str) -> TokenPair:
        """Create a token pair for the user and store the refresh token.

        Store failures propagate as ``AuthServiceError``.
        """
        now = self._clock()
        claims = {"sub": user_id, "email": email, "role": role}
        access_token = self._sign(claims, self._settings.jwt_secret, now, self.access_ttl)
        refresh_token = self._sign(claims, self._settings.jwt_refresh_secret, now, self.refresh_ttl)

        stored = await self._store.create_refresh_token(
            token=refresh_token,
            user_id=user_id,
            expires_at=expires_at(self._settings.jwt_refresh_expires_in, now),
        )
        stored.unwrap()
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def decode_access(self, token: str) -> dict[str, Any]:
        """Raises ``jwt.InvalidTokenError`` on a bad signature or expiry."""
        return jwt.decode(token, self._settings.jwt_secret, algorithms=[self._settings.jwt_algorithm])

    def decode_refresh(self, token: str) -> dict[str, Any]:
        """Raises ``jwt.InvalidTokenError`` on a bad signature or expiry."""
        return jwt.decode(token, self._settings.jwt_refresh_secret, algorithms=[self._settings.jwt_algorithm])
