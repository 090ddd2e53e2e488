"""FastAPI application entrypoint for the record store."""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from record_store import models  # noqa: F401  registers tables on Base.metadata
from record_store.api import api_router
from record_store.core.config import get_settings
from record_store.db.base import Base
from record_store.db.session import engine
from record_store.services.scheduler import get_scheduler, schedule_cleanup_job, start_scheduler

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.cleanup_enabled:
        start_scheduler()
        schedule_cleanup_job()

    try:
        yield
    finally:
        scheduler = get_scheduler()
        if scheduler.running:
            scheduler.shutdown(wait=False)
        await engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(api_router)
