"""User-position assignment API schemas."""

from __future__ import annotations

from uuid import UUID

from sqlmodel import SQLModel

from app.schemas.positions import PositionRead
from app.schemas.users import UserRead

RUNTIME_ANNOTATION_TYPES = (UUID, PositionRead, UserRead)


class UserPositionCreate(SQLModel):
    """Payload assigning a user to a position."""

    user_id: UUID
    position_id: UUID


class UserPositionRead(SQLModel):
    """Assignment payload with the linked user and position embedded."""

    id: UUID
    user_id: UUID
    position_id: UUID
    user: UserRead | None = None
    position: PositionRead | None = None
