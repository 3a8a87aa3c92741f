"""Assignment model linking users to positions."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class UserPosition(SQLModel, table=True):
    """Assignment of one user to one position."""

    __tablename__ = "user_positions"  # pyright: ignore[reportAssignmentType]
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "position_id",
            name="uq_user_positions_user_position",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    position_id: UUID = Field(foreign_key="positions.id", index=True)
