"""Service layer for login session records."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.models.session import UserSession
from record_store.schemas.session import SessionCreate


async def create_session(session: AsyncSession, data: SessionCreate) -> UserSession:
    record = UserSession(
        user_id=data.user_id,
        ip_address=data.ip_address,
        user_agent=data.user_agent,
        expires_at=data.expires_at,
    )
    session.add(record)
    await session.flush()
    await session.refresh(record)
    return record


async def list_user_sessions(session: AsyncSession, user_id: str) -> list[UserSession]:
    result = await session.execute(
        select(UserSession).where(UserSession.user_id == user_id).order_by(UserSession.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_session(session: AsyncSession, session_id: str) -> None:
    record = await session.get(UserSession, session_id)
    if not record:
        raise ValueError(f"Session {session_id} not found")
    await session.delete(record)
    await session.flush()


async def delete_user_sessions(session: AsyncSession, user_id: str) -> int:
    result = await session.execute(delete(UserSession).where(UserSession.user_id == user_id))
    return result.rowcount or 0


async def delete_expired_sessions(session: AsyncSession, now: datetime | None = None) -> int:
    cutoff = now or datetime.now(timezone.utc)
    result = await session.execute(
        delete(UserSession).where(UserSession.expires_at.is_not(None), UserSession.expires_at < cutoff)
    )
    return result.rowcount or 0
