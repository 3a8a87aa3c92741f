"""Position CRUD endpoints with audited mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import AUTH_DEP, RECORDER_DEP, SESSION_DEP
from app.core.auth import AuthContext
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.positions import PositionCreate, PositionRead, PositionUpdate
from app.services import positions as positions_service
from app.services.audit import AuditRecorder

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/positions", tags=["positions"])


def _read(position: object) -> PositionRead:
    return PositionRead.model_validate(position, from_attributes=True)


@router.get("", response_model=DataResponse[list[PositionRead]])
async def list_positions(
    session: AsyncSession = SESSION_DEP,
) -> DataResponse[list[PositionRead]]:
    """List all positions."""
    positions = await positions_service.list_positions(session)
    return DataResponse(data=[_read(position) for position in positions])


@router.post(
    "",
    response_model=DataResponse[PositionRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_position(
    payload: PositionCreate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[PositionRead]:
    """Create a position."""
    position = await positions_service.create_position(
        session,
        recorder,
        payload,
        actor_id=auth.actor_id,
    )
    return DataResponse(data=_read(position))


@router.put("/{position_id}", response_model=DataResponse[PositionRead])
async def update_position(
    position_id: str,
    payload: PositionUpdate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[PositionRead]:
    """Rename a position."""
    position = await positions_service.update_position(
        session,
        recorder,
        position_id,
        payload,
        actor_id=auth.actor_id,
    )
    return DataResponse(data=_read(position))


@router.delete("/{position_id}", response_model=MessageResponse)
async def delete_position(
    position_id: str,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> MessageResponse:
    """Delete a position."""
    await positions_service.delete_position(
        session,
        recorder,
        position_id,
        actor_id=auth.actor_id,
    )
    return MessageResponse(message="Position deleted successfully")
