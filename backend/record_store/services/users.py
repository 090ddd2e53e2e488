"""User service functions for CRUD lookups and updates."""
from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from record_store.models.user import User, UserStatus
from record_store.schemas.user import UserCreate, UserUpdate


class UserNotFoundError(LookupError):
    """Raised when no user matches the lookup."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class UserConflictError(ValueError):
    """Raised when an email, username or GitHub id is already taken."""


async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_github_id(session: AsyncSession, github_id: str) -> User | None:
    result = await session.execute(select(User).where(User.github_id == github_id))
    return result.scalar_one_or_none()


async def require_user(session: AsyncSession, user_id: str) -> User:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise UserNotFoundError()
    return user


async def _ensure_unique(
    session: AsyncSession,
    email: str | None,
    username: str | None,
    exclude_id: str | None = None,
) -> None:
    clauses = []
    if email is not None:
        clauses.append(User.email == email)
    if username is not None:
        clauses.append(User.username == username)
    if not clauses:
        return

    query = select(User).where(or_(*clauses))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await session.execute(query)
    for existing in result.scalars():
        if email is not None and existing.email == email:
            raise UserConflictError("User with this email already exists")
        raise UserConflictError("Username already taken")


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    await _ensure_unique(session, data.email, data.username)
    user = User(
        email=data.email,
        password_hash=data.password_hash,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        avatar=data.avatar,
        github_id=data.github_id,
        email_verified=data.email_verified,
        role=data.role,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise UserConflictError("User already exists") from exc
    await session.refresh(user)
    return user


async def update_user(session: AsyncSession, user_id: str, data: UserUpdate) -> User:
    user = await require_user(session, user_id)
    changes = data.model_dump(exclude_unset=True)

    await _ensure_unique(
        session,
        changes.get("email") if changes.get("email") != user.email else None,
        changes.get("username") if changes.get("username") != user.username else None,
        exclude_id=user.id,
    )
    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await session.flush()
    except IntegrityError as exc:
        raise UserConflictError("User already exists") from exc
    await session.refresh(user)
    return user


async def delete_user(session: AsyncSession, user_id: str) -> None:
    user = await require_user(session, user_id)
    await session.delete(user)
    await session.flush()


async def list_users(session: AsyncSession, skip: int = 0, take: int = 10) -> tuple[list[User], int]:
    visible = User.status != UserStatus.DELETED
    result = await session.execute(
        select(User).where(visible).order_by(User.created_at).offset(skip).limit(take)
    )
    total = await session.scalar(select(func.count()).select_from(User).where(visible))
    return list(result.scalars().all()), total or 0
