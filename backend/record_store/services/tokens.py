"""Service layer for refresh and password-reset token persistence."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from record_store.models.token import PasswordResetToken, RefreshToken
from record_store.schemas.token import PasswordResetTokenCreate, RefreshTokenCreate


async def create_refresh_token(session: AsyncSession, data: RefreshTokenCreate) -> RefreshToken:
    record = RefreshToken(token=data.token, user_id=data.user_id, expires_at=data.expires_at)
    session.add(record)
    await session.flush()
    await session.refresh(record)
    return record


async def get_refresh_token(session: AsyncSession, token: str) -> RefreshToken | None:
    result = await session.execute(
        select(RefreshToken).options(selectinload(RefreshToken.user)).where(RefreshToken.token == token)
    )
    return result.scalar_one_or_none()


async def delete_refresh_token(session: AsyncSession, token: str) -> int:
    result = await session.execute(delete(RefreshToken).where(RefreshToken.token == token))
    return result.rowcount or 0


async def delete_user_refresh_tokens(session: AsyncSession, user_id: str) -> int:
    result = await session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    return result.rowcount or 0


async def delete_expired_refresh_tokens(session: AsyncSession, now: datetime | None = None) -> int:
    cutoff = now or datetime.now(timezone.utc)
    result = await session.execute(delete(RefreshToken).where(RefreshToken.expires_at < cutoff))
    return result.rowcount or 0


async def create_password_reset_token(session: AsyncSession, data: PasswordResetTokenCreate) -> PasswordResetToken:
    record = PasswordResetToken(token=data.token, user_id=data.user_id, expires_at=data.expires_at)
    session.add(record)
    await session.flush()
    await session.refresh(record)
    return record


async def get_password_reset_token(session: AsyncSession, token: str) -> PasswordResetToken | None:
    result = await session.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
    return result.scalar_one_or_none()


async def delete_password_reset_token(session: AsyncSession, token: str) -> int:
    result = await session.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
    return result.rowcount or 0


async def delete_expired_password_reset_tokens(session: AsyncSession, now: datetime | None = None) -> int:
    cutoff = now or datetime.now(timezone.utc)
    result = await session.execute(delete(PasswordResetToken).where(PasswordResetToken.expires_at < cutoff))
    return result.rowcount or 0
