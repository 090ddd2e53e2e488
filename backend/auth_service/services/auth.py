"""Account and token lifecycle orchestration.

The service owns no storage: every read and write goes through the injected
:class:`RecordStoreClient`. Multi-step cascades (logout, password change,
account deletion, password reset) are not atomic; each step is idempotent and
safe to repeat.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable

import jwt  # PyJWT

from auth_service.core.config import Settings
from auth_service.core.errors import AuthServiceError, ErrorKind
from auth_service.core.security import PasswordHasher
from auth_service.schemas.auth import (
    AuthResult,
    ClientInfo,
    CurrentUser,
    ExternalProfile,
    MessageResponse,
    PasswordResetRequested,
    RegisterRequest,
)
from auth_service.schemas.records import UserPublic
from auth_service.services.record_store import RecordStoreClient
from auth_service.services.tokens import TokenIssuer, TokenPair, ensure_utc, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
ACCOUNT_INACTIVE = "Account is not active"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
EXPIRED_RESET_TOKEN = "Reset token has expired"
RESET_REQUESTED = "If an account exists with this email, a password reset link will be sent"


class AuthService:
    """Register, authenticate and revoke credentials for users of the record store."""

    def __init__(
        self,
        store: RecordStoreClient,
        issuer: TokenIssuer,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._settings = settings
        self._clock = clock

    @property
    def store(self) -> RecordStoreClient:
        return self._store

    def _result(self, user: UserPublic, tokens: TokenPair) -> AuthResult:
        return AuthResult(user=user, access_token=tokens.access_token, refresh_token=tokens.refresh_token)

    async def register(self, data: RegisterRequest) -> AuthResult:
        user = (
            await self._store.create_user(
                email=data.email,
                password_hash=PasswordHasher.hash(data.password),
                username=data.username,
                first_name=data.first_name,
                last_name=data.last_name,
            )
        ).unwrap()
        tokens = await self._issuer.issue(user.id, user.email, user.role)
        logger.info("Registered user %s", user.id)
        return self._result(user, tokens)

    async def validate_credentials(self, email: str, password: str) -> UserPublic:
        """Return the user if the password matches and the account is active.

        Unknown emails, OAuth-only accounts and wrong passwords share one
        message. The account status is only checked after the password.
        """
        found = await self._store.find_user_by_email(email)
        if found.kind is ErrorKind.NOT_FOUND:
            PasswordHasher.dummy_verify()
            raise AuthServiceError.unauthorized(INVALID_CREDENTIALS)
        user = found.unwrap()

        if not PasswordHasher.verify(password, user.password_hash):
            raise AuthServiceError.unauthorized(INVALID_CREDENTIALS)
        if not user.is_active:
            raise AuthServiceError.unauthorized(ACCOUNT_INACTIVE)
        return user.public()

    async def login(self, email: str, password: str, client: ClientInfo | None = None) -> AuthResult:
        user = await self.validate_credentials(email, password)
        tokens = await self._issuer.issue(user.id, user.email, user.role)

        now = self._clock()
        client = client or ClientInfo()
        (
            await self._store.create_session(
                user_id=user.id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
                expires_at=now + self._issuer.refresh_ttl,
            )
        ).unwrap()
        user = (await self._store.update_user(user.id, last_login_at=now)).unwrap()
        return self._result(user, tokens)

    async def refresh(self, refresh_token: str) -> AuthResult:
        """Rotate a refresh token: the presented token is deleted before a new pair is issued.

        Every failure is reported as the same ``Invalid refresh token`` error.
        """
        try:
            claims = self._issuer.decode_refresh(refresh_token)
        except jwt.InvalidTokenError as exc:
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN) from exc

        found = await self._store.find_refresh_token(refresh_token)
        record = found.value if found.ok else None
        if record is None or record.user is None:
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN)
        if ensure_utc(record.expires_at) < self._clock():
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN)
        if claims.get("sub") != record.user_id or not record.user.is_active:
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN)

        if not (await self._store.delete_refresh_token(refresh_token)).ok:
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN)

        user = record.user
        try:
            tokens = await self._issuer.issue(user.id, user.email, user.role)
        except AuthServiceError as exc:
            raise AuthServiceError.unauthorized(INVALID_REFRESH_TOKEN) from exc
        logger.info("Rotated refresh token for user %s", user.id)
        return self._result(user, tokens)

    async def _revoke_all(self, user_id: str) -> None:
        (await self._store.delete_user_refresh_tokens(user_id)).unwrap()
        (await self._store.delete_user_sessions(user_id)).unwrap()
        logger.info("Revoked all refresh tokens and sessions for user %s", user_id)

    async def logout(self, user_id: str) -> MessageResponse:
        await self._revoke_all(user_id)
        return MessageResponse(message="Logout successful")

    async def logout_all(self, user_id: str) -> MessageResponse:
        return await self.logout(user_id)

    async def get_profile(self, user_id: str) -> UserPublic:
        return (await self._store.find_user_by_id(user_id)).unwrap()

    async def authenticate_access_token(self, token: str) -> CurrentUser:
        """Resolve a bearer access token to an active user."""
        try:
            claims = self._issuer.decode_access(token)
        except jwt.InvalidTokenError as exc:
            raise AuthServiceError.unauthorized("Unauthorized") from exc

        user_id = claims.get("sub")
        found = await self._store.find_user_by_id(user_id) if user_id else None
        if found is None or not found.ok or not found.value.is_active:
            raise AuthServiceError.unauthorized("Unauthorized")
        return CurrentUser(user_id=user_id, email=claims.get("email", ""), role=claims.get("role", ""))

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> MessageResponse:
        user = (await self._store.find_user_by_id_with_hash(user_id)).unwrap()
        if not PasswordHasher.verify(current_password, user.password_hash):
            raise AuthServiceError.unauthorized("Current password is incorrect")

        (await self._store.update_user(user_id, password_hash=PasswordHasher.hash(new_password))).unwrap()
        await self._revoke_all(user_id)
        return MessageResponse(message="Password changed successfully. Please login again.")

    async def delete_account(self, user_id: str, password: str) -> MessageResponse:
        user = (await self._store.find_user_by_id_with_hash(user_id)).unwrap()
        if not PasswordHasher.verify(password, user.password_hash):
            raise AuthServiceError.unauthorized("Password is incorrect")

        await self._revoke_all(user_id)
        (await self._store.delete_user(user_id)).unwrap()
        logger.info("Deleted account %s", user_id)
        return MessageResponse(message="Account deleted successfully")

    async def _create_external_user(self, profile: ExternalProfile) -> UserPublic | None:
        """Create an OAuth-only user, dropping a username that is already taken.

        Returns ``None`` when the email itself conflicts.
        """
        username = profile.username
        while True:
            created = await self._store.create_user(
                email=profile.email,
                github_id=profile.external_id,
                username=username,
                first_name=profile.first_name,
                last_name=profile.last_name,
                avatar=profile.avatar,
                email_verified=True,
            )
            if created.kind is not ErrorKind.CONFLICT:
                return created.unwrap()
            if username is None:
                return None
            logger.info("Username %s is taken, creating external user %s without one", username, profile.external_id)
            username = None

    async def oauth_upsert(self, profile: ExternalProfile) -> AuthResult:
        """Resolve an external identity to a user: by external id, then email, else create."""
        now = self._clock()
        user: UserPublic | None = None

        linked = (await self._store.find_user_by_external_id(profile.external_id)).unwrap()
        if linked is not None:
            if not linked.is_active:
                raise AuthServiceError.unauthorized(ACCOUNT_INACTIVE)
            user = (
                await self._store.update_user(
                    linked.id,
                    last_login_at=now,
                    avatar=profile.avatar or linked.avatar,
                )
            ).unwrap()
        else:
            by_email = await self._store.find_user_by_email(profile.email)
            if by_email.ok:
                existing = by_email.value
                if not existing.is_active:
                    raise AuthServiceError.unauthorized(ACCOUNT_INACTIVE)
                user = (
                    await self._store.update_user(
                        existing.id,
                        github_id=profile.external_id,
                        avatar=profile.avatar or existing.avatar,
                        last_login_at=now,
                    )
                ).unwrap()
                logger.info("Linked external identity %s to user %s", profile.external_id, existing.id)
            elif by_email.kind is ErrorKind.NOT_FOUND:
                created = await self._create_external_user(profile)
                if created is not None:
                    user = (await self._store.update_user(created.id, last_login_at=now)).unwrap()
            else:
                by_email.unwrap()

        if user is None:
            raise AuthServiceError.unauthorized("Failed to authenticate")

        tokens = await self._issuer.issue(user.id, user.email, user.role)
        return self._result(user, tokens)

    async def request_password_reset(self, email: str) -> PasswordResetRequested:
        """Create a one-hour reset token if the email belongs to a user.

        The response is identical whether or not the email matched.
        """
        reset_link: str | None = None
        found = await self._store.find_user_by_email(email)
        if found.ok:
            user = found.value
            token = secrets.token_hex(32)
            expiry = self._clock() + timedelta(minutes=self._settings.password_reset_ttl_minutes)
            stored = await self._store.create_password_reset_token(token=token, user_id=user.id, expires_at=expiry)
            if stored.ok:
                reset_link = f"{self._settings.frontend_url.rstrip('/')}/auth/reset-password?token={token}"
                logger.info("Password reset link for user %s: %s", user.id, reset_link)
            else:
                logger.warning("Could not store password reset token for user %s: %s", user.id, stored.failure.message)
        elif found.kind is ErrorKind.NOT_FOUND:
            logger.info("Password reset requested for unknown email")
        else:
            logger.warning("Password reset lookup failed: %s", found.failure.message)

        return PasswordResetRequested(
            message=RESET_REQUESTED,
            reset_link=reset_link if self._settings.expose_reset_links else None,
        )

    async def reset_password(self, token: str, new_password: str) -> MessageResponse:
        record = (await self._store.find_password_reset_token(token)).unwrap()
        if record is None:
            raise AuthServiceError.unauthorized(INVALID_RESET_TOKEN)
        if self._clock() > ensure_utc(record.expires_at):
            raise AuthServiceError.unauthorized(EXPIRED_RESET_TOKEN)

        (await self._store.update_user(record.user_id, password_hash=PasswordHasher.hash(new_password))).unwrap()
        (await self._store.delete_password_reset_token(token)).unwrap()
        await self._revoke_all(record.user_id)
        return MessageResponse(message="Password reset successfully. Please login with your new password.")


def build_auth_service(store: RecordStoreClient, settings: Settings) -> AuthService:
    return AuthService(store, TokenIssuer(store, settings), settings)
