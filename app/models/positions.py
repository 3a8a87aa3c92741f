"""Position model for named roles users can be assigned to."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Position(SQLModel, table=True):
    """Named position; names are unique."""

    __tablename__ = "positions"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, index=True)
