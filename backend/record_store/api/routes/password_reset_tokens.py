"""Password reset token endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.core.dependencies import get_db
from record_store.schemas.token import PasswordResetTokenCreate, PasswordResetTokenRead
from record_store.services import tokens as token_service
from record_store.services.users import get_user_by_id

router = APIRouter(prefix="/password-reset-tokens", tags=["password-reset-tokens"])


@router.post("", response_model=PasswordResetTokenRead, status_code=status.HTTP_201_CREATED)
async def create_password_reset_token(
    payload: PasswordResetTokenCreate,
    session: AsyncSession = Depends(get_db),
) -> PasswordResetTokenRead:
    if not await get_user_by_id(session, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    record = await token_service.create_password_reset_token(session, payload)
    await session.commit()
    return PasswordResetTokenRead.model_validate(record)


@router.post("/cleanup", status_code=status.HTTP_204_NO_CONTENT)
async def clean_expired_password_reset_tokens(session: AsyncSession = Depends(get_db)) -> None:
    await token_service.delete_expired_password_reset_tokens(session)
    await session.commit()


@router.get("/{token}", response_model=PasswordResetTokenRead)
async def find_password_reset_token(token: str, session: AsyncSession = Depends(get_db)) -> PasswordResetTokenRead:
    record = await token_service.get_password_reset_token(session, token)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Password reset token not found")
    return PasswordResetTokenRead.model_validate(record)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_password_reset_token(token: str, session: AsyncSession = Depends(get_db)) -> None:
    await token_service.delete_password_reset_token(session, token)
    await session.commit()
