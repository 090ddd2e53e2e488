"""Error taxonomy shared by the record store client and the auth orchestrator."""
from __future__ import annotations

import enum

from fastapi import status


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


DEFAULT_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AuthServiceError(Exception):
    """Outward failure of an authentication operation."""

    def __init__(self, kind: ErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code or DEFAULT_STATUS[kind]

    @classmethod
    def unauthorized(cls, message: str) -> "AuthServiceError":
        return cls(ErrorKind.UNAUTHORIZED, message)
