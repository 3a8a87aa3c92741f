"""User API schemas for create, update, and read operations."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (UUID,)


class UserBase(SQLModel):
    """Common user profile fields shared across user payload schemas."""

    name: str = Field(
        min_length=1,
        description="Full display name.",
        examples=["Alex Chen"],
    )
    username: str = Field(
        min_length=1,
        description="Unique login name.",
        examples=["alex"],
    )


class UserCreate(UserBase):
    """Payload used to create a user record."""

    password: str = Field(
        min_length=1,
        description="Plaintext password; stored only as a bcrypt digest.",
        examples=["correct horse battery staple"],
    )


class UserUpdate(SQLModel):
    """Payload for partial user updates; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    username: str | None = Field(default=None, min_length=1)
    password: str | None = Field(default=None, min_length=1)


class UserRead(UserBase):
    """User payload returned by API responses; never carries credentials."""

    id: UUID = Field(
        description="Internal user UUID.",
        examples=["11111111-1111-1111-1111-111111111111"],
    )
