"""Task API schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

from app.schemas.users import UserRead

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, UserRead)


class TaskCreate(SQLModel):
    """Payload used to create a task."""

    user_id: UUID = Field(description="Owning user.")
    todo: str = Field(min_length=1, examples=["buy milk"])
    start_date: datetime | None = None
    end_date: datetime | None = None


class TaskUpdate(SQLModel):
    """Payload for partial task updates."""

    user_id: UUID | None = None
    todo: str | None = Field(default=None, min_length=1)
    start_date: datetime | None = None
    end_date: datetime | None = None


class TaskRead(SQLModel):
    """Task payload returned by API responses, with its owner embedded."""

    id: UUID
    user_id: UUID
    todo: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    user: UserRead | None = None
