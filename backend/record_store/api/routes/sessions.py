"""Login session endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.core.dependencies import get_db
from record_store.schemas.session import SessionCreate, SessionRead
from record_store.services import sessions as session_service
from record_store.services.users import get_user_by_id

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
async def create_session(payload: SessionCreate, session: AsyncSession = Depends(get_db)) -> SessionRead:
    if not await get_user_by_id(session, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    record = await session_service.create_session(session, payload)
    await session.commit()
    return SessionRead.model_validate(record)


@router.post("/cleanup", status_code=status.HTTP_204_NO_CONTENT)
async def clean_expired_sessions(session: AsyncSession = Depends(get_db)) -> None:
    await session_service.delete_expired_sessions(session)
    await session.commit()


@router.get("/user/{user_id}", response_model=list[SessionRead])
async def find_user_sessions(user_id: str, session: AsyncSession = Depends(get_db)) -> list[SessionRead]:
    records = await session_service.list_user_sessions(session, user_id)
    return [SessionRead.model_validate(record) for record in records]


@router.delete("/user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_sessions(user_id: str, session: AsyncSession = Depends(get_db)) -> None:
    await session_service.delete_user_sessions(session, user_id)
    await session.commit()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, session: AsyncSession = Depends(get_db)) -> None:
    try:
        await session_service.delete_session(session, session_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from exc
    await session.commit()
