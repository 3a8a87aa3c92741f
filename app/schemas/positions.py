"""Position API schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (UUID,)


class PositionCreate(SQLModel):
    """Payload used to create a position."""

    name: str = Field(min_length=1, examples=["Engineering Manager"])


class PositionUpdate(SQLModel):
    """Payload for partial position updates."""

    name: str | None = Field(default=None, min_length=1)


class PositionRead(SQLModel):
    """Position payload returned by API responses."""

    id: UUID
    name: str
