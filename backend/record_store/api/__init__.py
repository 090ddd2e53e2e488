"""API router aggregator."""
from fastapi import APIRouter

from record_store.api.routes import password_reset_tokens, refresh_tokens, sessions, users

api_router = APIRouter(prefix="/api")
api_router.include_router(users.router)
api_router.include_router(refresh_tokens.router)
api_router.include_router(sessions.router)
api_router.include_router(password_reset_tokens.router)


@api_router.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok", "service": "record-store"}


__all__ = ["api_router"]
