"""User-to-position assignment services with reference and duplicate checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger
from app.db import crud
from app.models.positions import Position
from app.models.user_positions import UserPosition
from app.models.users import User
from app.schemas.positions import PositionRead
from app.schemas.user_positions import UserPositionRead
from app.services.mutations import load_or_404, parse_entity_id, persist, remove
from app.services.snapshots import snapshot
from app.services.users import to_user_read

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.schemas.user_positions import UserPositionCreate
    from app.services.audit import AuditRecorder

AUDIT_ENTITY = "user_positions"
DUPLICATE_ASSIGNMENT_DETAIL = "User is already assigned to this position"

logger = get_logger(__name__)


def to_user_position_read(
    assignment: UserPosition,
    *,
    user: User | None,
    position: Position | None,
) -> UserPositionRead:
    read = UserPositionRead.model_validate(assignment, from_attributes=True)
    if user is not None:
        read.user = to_user_read(user)
    if position is not None:
        read.position = PositionRead.model_validate(position, from_attributes=True)
    return read


async def list_user_positions(session: AsyncSession) -> list[UserPositionRead]:
    """Return all assignments with linked user and position embedded."""
    try:
        assignments = await crud.list_all(session, UserPosition)
        users = {user.id: user for user in await crud.list_all(session, User)}
        positions = {position.id: position for position in await crud.list_all(session, Position)}
    except SQLAlchemyError as exc:
        logger.exception("entity_store.read_failed entity=UserPosition")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user positions",
        ) from exc
    return [
        to_user_position_read(
            assignment,
            user=users.get(assignment.user_id),
            position=positions.get(assignment.position_id),
        )
        for assignment in assignments
    ]


async def create_user_position(
    session: AsyncSession,
    recorder: AuditRecorder,
    payload: UserPositionCreate,
    *,
    actor_id: str | None,
) -> UserPositionRead:
    """Assign a user to a position.

    Both references must exist (400 otherwise) and the pair must not already
    be assigned (409 otherwise). Neither failure touches the entity store or
    the audit trail.
    """
    user = await crud.get_by_id(session, User, payload.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")
    position = await crud.get_by_id(session, Position, payload.position_id)
    if position is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Position not found")
    existing = await crud.get_one_by(
        session,
        UserPosition,
        user_id=payload.user_id,
        position_id=payload.position_id,
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_ASSIGNMENT_DETAIL,
        )

    assignment = await persist(
        session,
        UserPosition.model_validate(payload.model_dump()),
        failure_detail="Failed to create user position",
        conflict_detail=DUPLICATE_ASSIGNMENT_DETAIL,
    )
    if actor_id:
        await recorder.record_create(
            actor_id, AUDIT_ENTITY, str(assignment.id), snapshot(assignment)
        )
    return to_user_position_read(assignment, user=user, position=position)


async def delete_user_position(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_assignment_id: str,
    *,
    actor_id: str | None,
) -> None:
    """Remove an assignment and audit its final state."""
    assignment_id = parse_entity_id(raw_assignment_id, label="user position")
    assignment = await load_or_404(session, UserPosition, assignment_id, label="user position")
    before = snapshot(assignment)
    await remove(
        session,
        assignment,
        failure_detail="Failed to delete user position",
        conflict_detail="User position is still referenced",
    )
    if actor_id:
        await recorder.record_delete(actor_id, AUDIT_ENTITY, str(assignment_id), before)
