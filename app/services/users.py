"""User registration, lookup, and audited mutation services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger
from app.core.security import hash_password
from app.db import crud
from app.models.users import User
from app.schemas.users import UserRead
from app.services.mutations import load_or_404, parse_entity_id, persist, remove
from app.services.snapshots import snapshot

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.schemas.users import UserCreate, UserUpdate
    from app.services.audit import AuditRecorder

AUDIT_ENTITY = "users"
USERNAME_CONFLICT_DETAIL = "Username already exists"

logger = get_logger(__name__)


def to_user_read(user: User) -> UserRead:
    """Response view of a user; the credential digest is never included."""
    return UserRead.model_validate(user, from_attributes=True)


async def list_users(session: AsyncSession) -> Sequence[User]:
    try:
        return await crud.list_all(session, User, order_by="username")
    except SQLAlchemyError as exc:
        logger.exception("entity_store.read_failed entity=User")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch users",
        ) from exc


async def insert_user(session: AsyncSession, payload: UserCreate) -> User:
    """Hash the supplied password and store a new user."""
    user = User(
        name=payload.name,
        username=payload.username,
        password_hash=hash_password(payload.password),
    )
    return await persist(
        session,
        user,
        failure_detail="Failed to create user",
        conflict_detail=USERNAME_CONFLICT_DETAIL,
    )


async def create_user(
    session: AsyncSession,
    recorder: AuditRecorder,
    payload: UserCreate,
    *,
    actor_id: str | None,
) -> User:
    """Create a user and audit the creation when an actor is known."""
    user = await insert_user(session, payload)
    if actor_id:
        await recorder.record_create(actor_id, AUDIT_ENTITY, str(user.id), snapshot(user))
    return user


async def update_user(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_user_id: str,
    payload: UserUpdate,
    *,
    actor_id: str | None,
) -> User:
    """Apply a partial update to a user and audit before/after state."""
    user_id = parse_entity_id(raw_user_id, label="user")
    user = await load_or_404(session, User, user_id, label="user")
    before = snapshot(user)

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    password = updates.pop("password", None)
    for field_name, value in updates.items():
        setattr(user, field_name, value)
    if password is not None:
        user.password_hash = hash_password(password)

    user = await persist(
        session,
        user,
        failure_detail="Failed to update user",
        conflict_detail=USERNAME_CONFLICT_DETAIL,
    )
    if actor_id:
        await recorder.record_update(actor_id, AUDIT_ENTITY, str(user.id), before, snapshot(user))
    return user


async def delete_user(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_user_id: str,
    *,
    actor_id: str | None,
) -> None:
    """Delete a user and audit its final state."""
    user_id = parse_entity_id(raw_user_id, label="user")
    user = await load_or_404(session, User, user_id, label="user")
    before = snapshot(user)
    await remove(
        session,
        user,
        failure_detail="Failed to delete user",
        conflict_detail="User is still referenced by tasks or positions",
    )
    if actor_id:
        await recorder.record_delete(actor_id, AUDIT_ENTITY, str(user_id), before)
