"""Task model representing a user's to-do item and its schedule."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Task(SQLModel, table=True):
    """User-owned task with an optional start/end window."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    todo: str
    start_date: datetime | None = None
    end_date: datetime | None = None
