"""User record endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.core.dependencies import get_db
from record_store.schemas.user import UserCreate, UserPage, UserRead, UserUpdate, UserWithHash
from record_store.services import users as user_service
from record_store.services.users import UserConflictError, UserNotFoundError

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, session: AsyncSession = Depends(get_db)) -> UserRead:
    try:
        user = await user_service.create_user(session, payload)
    except UserConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    await session.commit()
    return UserRead.model_validate(user)


@router.get("", response_model=UserPage)
async def list_users(
    skip: int = Query(default=0, ge=0),
    take: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> UserPage:
    users, total = await user_service.list_users(session, skip=skip, take=take)
    return UserPage(users=[UserRead.model_validate(user) for user in users], total=total, skip=skip, take=take)


@router.get("/by-email", response_model=UserWithHash)
async def find_user_by_email(
    email: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_db),
) -> UserWithHash:
    user = await user_service.get_user_by_email(session, email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserWithHash.model_validate(user)


@router.get("/by-github", response_model=UserWithHash)
async def find_user_by_github_id(
    github_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_db),
) -> UserWithHash:
    user = await user_service.get_user_by_github_id(session, github_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserWithHash.model_validate(user)


@router.get("/{user_id}", response_model=UserRead)
async def find_user_by_id(user_id: str, session: AsyncSession = Depends(get_db)) -> UserRead:
    user = await user_service.get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.get("/{user_id}/with-password", response_model=UserWithHash)
async def find_user_by_id_with_hash(user_id: str, session: AsyncSession = Depends(get_db)) -> UserWithHash:
    user = await user_service.get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserWithHash.model_validate(user)


@router.api_route("/{user_id}", methods=["PUT", "PATCH"], response_model=UserRead)
async def update_user(user_id: str, payload: UserUpdate, session: AsyncSession = Depends(get_db)) -> UserRead:
    try:
        user = await user_service.update_user(session, user_id, payload)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UserConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    await session.commit()
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, session: AsyncSession = Depends(get_db)) -> None:
    try:
        await user_service.delete_user(session, user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    await session.commit()
