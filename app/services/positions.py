"""Position lookup and audited mutation services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger
from app.db import crud
from app.models.positions import Position
from app.services.mutations import load_or_404, parse_entity_id, persist, remove
from app.services.snapshots import snapshot

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.schemas.positions import PositionCreate, PositionUpdate
    from app.services.audit import AuditRecorder

AUDIT_ENTITY = "positions"
NAME_CONFLICT_DETAIL = "Position name already exists"

logger = get_logger(__name__)


async def list_positions(session: AsyncSession) -> Sequence[Position]:
    try:
        return await crud.list_all(session, Position, order_by="name")
    except SQLAlchemyError as exc:
        logger.exception("entity_store.read_failed entity=Position")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch positions",
        ) from exc


async def create_position(
    session: AsyncSession,
    recorder: AuditRecorder,
    payload: PositionCreate,
    *,
    actor_id: str | None,
) -> Position:
    """Create a position and audit the creation."""
    position = await persist(
        session,
        Position.model_validate(payload.model_dump()),
        failure_detail="Failed to create position",
        conflict_detail=NAME_CONFLICT_DETAIL,
    )
    if actor_id:
        await recorder.record_create(
            actor_id, AUDIT_ENTITY, str(position.id), snapshot(position)
        )
    return position


async def update_position(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_position_id: str,
    payload: PositionUpdate,
    *,
    actor_id: str | None,
) -> Position:
    """Rename a position and audit before/after state."""
    position_id = parse_entity_id(raw_position_id, label="position")
    position = await load_or_404(session, Position, position_id, label="position")
    before = snapshot(position)

    for field_name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(position, field_name, value)

    position = await persist(
        session,
        position,
        failure_detail="Failed to update position",
        conflict_detail=NAME_CONFLICT_DETAIL,
    )
    if actor_id:
        await recorder.record_update(
            actor_id, AUDIT_ENTITY, str(position.id), before, snapshot(position)
        )
    return position


async def delete_position(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_position_id: str,
    *,
    actor_id: str | None,
) -> None:
    """Delete a position and audit its final state."""
    position_id = parse_entity_id(raw_position_id, label="position")
    position = await load_or_404(session, Position, position_id, label="position")
    before = snapshot(position)
    await remove(
        session,
        position,
        failure_detail="Failed to delete position",
        conflict_detail="Position still has assigned users",
    )
    if actor_id:
        await recorder.record_delete(actor_id, AUDIT_ENTITY, str(position_id), before)
