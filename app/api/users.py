"""User CRUD endpoints with audited mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import AUTH_DEP, RECORDER_DEP, SESSION_DEP
from app.core.auth import AuthContext
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.users import UserCreate, UserRead, UserUpdate
from app.services import users as users_service
from app.services.audit import AuditRecorder

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=DataResponse[list[UserRead]])
async def list_users(
    session: AsyncSession = SESSION_DEP,
) -> DataResponse[list[UserRead]]:
    """List all users."""
    users = await users_service.list_users(session)
    return DataResponse(data=[users_service.to_user_read(user) for user in users])


@router.post(
    "",
    response_model=DataResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[UserRead]:
    """Create a user."""
    user = await users_service.create_user(session, recorder, payload, actor_id=auth.actor_id)
    return DataResponse(data=users_service.to_user_read(user))


@router.put("/{user_id}", response_model=DataResponse[UserRead])
async def update_user(
    user_id: str,
    payload: UserUpdate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[UserRead]:
    """Update a user's profile fields or password."""
    user = await users_service.update_user(
        session,
        recorder,
        user_id,
        payload,
        actor_id=auth.actor_id,
    )
    return DataResponse(data=users_service.to_user_read(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> MessageResponse:
    """Delete a user."""
    await users_service.delete_user(session, recorder, user_id, actor_id=auth.actor_id)
    return MessageResponse(message="User deleted successfully")
