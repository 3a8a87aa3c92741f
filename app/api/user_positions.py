"""User-position assignment endpoints with audited mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import AUTH_DEP, RECORDER_DEP, SESSION_DEP
from app.core.auth import AuthContext
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.errors import ErrorResponse
from app.schemas.user_positions import UserPositionCreate, UserPositionRead
from app.services import user_positions as user_positions_service
from app.services.audit import AuditRecorder

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/user-positions", tags=["user-positions"])


@router.get("", response_model=DataResponse[list[UserPositionRead]])
async def list_user_positions(
    session: AsyncSession = SESSION_DEP,
) -> DataResponse[list[UserPositionRead]]:
    """List all assignments with linked user and position."""
    return DataResponse(data=await user_positions_service.list_user_positions(session))


@router.post(
    "",
    response_model=DataResponse[UserPositionRead],
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Referenced user or position does not exist.",
        },
        status.HTTP_409_CONFLICT: {
            "model": ErrorResponse,
            "description": "User is already assigned to this position.",
        },
    },
)
async def create_user_position(
    payload: UserPositionCreate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[UserPositionRead]:
    """Assign a user to a position."""
    assignment = await user_positions_service.create_user_position(
        session,
        recorder,
        payload,
        actor_id=auth.actor_id,
    )
    return DataResponse(data=assignment)


@router.delete("/{user_position_id}", response_model=MessageResponse)
async def delete_user_position(
    user_position_id: str,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> MessageResponse:
    """Remove a user-position assignment."""
    await user_positions_service.delete_user_position(
        session,
        recorder,
        user_position_id,
        actor_id=auth.actor_id,
    )
    return MessageResponse(message="User position deleted successfully")
