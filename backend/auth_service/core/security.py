"""Security helpers for password hashing and OAuth state signing."""
from __future__ import annotations

from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str | None) -> bool:
        if not hashed:
            # OAuth-only account; burn comparable time anyway
            _password_context.dummy_verify()
            return False
        return _password_context.verify(password, hashed)

    @staticmethod
    def dummy_verify() -> None:
        """Spend the time of a real verification when there is no user to check."""

        _password_context.dummy_verify()


class StateSigner:
    """Sign and unsign short-lived OAuth ``state`` payloads."""

    def __init__(self, secret: str, salt: str = "github-oauth-state") -> None:
        self._serializer = URLSafeTimedSerializer(secret, salt=salt)

    def dumps(self, data: dict[str, Any]) -> str:
        return self._serializer.dumps(data)

    def loads(self, token: str, max_age: int | None = None) -> dict[str, Any]:
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired) as exc:
            raise ValueError("Invalid or expired OAuth state") from exc
