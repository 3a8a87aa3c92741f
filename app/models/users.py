"""User model storing login identity and credential digest."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """Application user; `password_hash` holds a bcrypt digest, never plaintext."""

    __tablename__ = "users"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    username: str = Field(unique=True, index=True)
    password_hash: str
