"""Background scheduler purging expired tokens and sessions."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from record_store.core.config import get_settings
from record_store.db.session import get_session
from record_store.services.sessions import delete_expired_sessions
from record_store.services.tokens import delete_expired_password_reset_tokens, delete_expired_refresh_tokens

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cleanup-expired-records"

_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler()
    return _scheduler


def start_scheduler() -> None:
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def schedule_cleanup_job() -> None:
    settings = get_settings()
    scheduler = get_scheduler()
    trigger = IntervalTrigger(seconds=settings.cleanup_interval_seconds)
    scheduler.add_job(cleanup_expired_records, trigger=trigger, id=CLEANUP_JOB_ID, replace_existing=True)
    logger.info("Scheduled cleanup job every %s seconds", trigger.interval.total_seconds())


async def cleanup_expired_records() -> dict[str, int]:
    """Delete every refresh token, session and reset token past its expiry."""
    now = datetime.now(timezone.utc)
    async with get_session() as session:
        removed = {
            "refresh_tokens": await delete_expired_refresh_tokens(session, now),
            "sessions": await delete_expired_sessions(session, now),
            "password_reset_tokens": await delete_expired_password_reset_tokens(session, now),
        }
        await session.commit()

    if any(removed.values()):
        logger.info(
            "Removed %d refresh token(s), %d session(s), %d reset token(s)",
            removed["refresh_tokens"],
            removed["sessions"],
            removed["password_reset_tokens"],
        )
    return removed
