"""Refresh token endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.core.dependencies import get_db
from record_store.schemas.token import RefreshTokenCreate, RefreshTokenRead, RefreshTokenWithUser
from record_store.services import tokens as token_service
from record_store.services.users import get_user_by_id

router = APIRouter(prefix="/refresh-tokens", tags=["refresh-tokens"])


@router.post("", response_model=RefreshTokenRead, status_code=status.HTTP_201_CREATED)
async def create_refresh_token(payload: RefreshTokenCreate, session: AsyncSession = Depends(get_db)) -> RefreshTokenRead:
    if not await get_user_by_id(session, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    record = await token_service.create_refresh_token(session, payload)
    await session.commit()
    return RefreshTokenRead.model_validate(record)


@router.post("/cleanup", status_code=status.HTTP_204_NO_CONTENT)
async def clean_expired_refresh_tokens(session: AsyncSession = Depends(get_db)) -> None:
    await token_service.delete_expired_refresh_tokens(session)
    await session.commit()


@router.delete("/user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_refresh_tokens(user_id: str, session: AsyncSession = Depends(get_db)) -> None:
    await token_service.delete_user_refresh_tokens(session, user_id)
    await session.commit()


@router.get("/{token}", response_model=RefreshTokenWithUser)
async def find_refresh_token(token: str, session: AsyncSession = Depends(get_db)) -> RefreshTokenWithUser:
    record = await token_service.get_refresh_token(session, token)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Refresh token not found")
    return RefreshTokenWithUser.model_validate(record)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_refresh_token(token: str, session: AsyncSession = Depends(get_db)) -> None:
    await token_service.delete_refresh_token(session, token)
    await session.commit()
