"""
Unit tests for the expired record cleanup job.
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from record_store.models import PasswordResetToken, RefreshToken, User, UserSession
from record_store.services import scheduler


async def test_cleanup_removes_expired_records(session_factory, session_scope, monkeypatch):
    now = datetime.now(timezone.utc)
    async with session_factory() as session:
        user = User(email="a@x.com")
        session.add(user)
        await session.flush()
        session.add_all(
            [
                RefreshToken(token="old", user_id=user.id, expires_at=now - timedelta(days=1)),
                RefreshToken(token="new", user_id=user.id, expires_at=now + timedelta(days=1)),
                UserSession(user_id=user.id, expires_at=now - timedelta(hours=1)),
                UserSession(user_id=user.id, expires_at=None),
                PasswordResetToken(token="reset-old", user_id=user.id, expires_at=now - timedelta(minutes=5)),
            ]
        )
        await session.commit()

    monkeypatch.setattr(scheduler, "get_session", session_scope)
    removed = await scheduler.cleanup_expired_records()

    assert removed == {"refresh_tokens": 1, "sessions": 1, "password_reset_tokens": 1}
    async with session_factory() as session:
        tokens = (await session.execute(select(RefreshToken.token))).scalars().all()
        sessions = (await session.execute(select(UserSession))).scalars().all()
    assert tokens == ["new"]
    assert len(sessions) == 1


def test_schedule_cleanup_job_registers_interval_job():
    scheduler.schedule_cleanup_job()
    job = scheduler.get_scheduler().get_job(scheduler.CLEANUP_JOB_ID)
    assert job is not None
    scheduler.get_scheduler().remove_job(scheduler.CLEANUP_JOB_ID)
