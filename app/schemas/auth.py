"""Login and registration payload schemas."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel

from app.schemas.users import UserRead

RUNTIME_ANNOTATION_TYPES = (UserRead,)


class LoginRequest(SQLModel):
    """Credentials submitted to obtain a session token."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(SQLModel):
    """Issued session token and the authenticated user's profile."""

    token: str = Field(description="HS256 bearer token valid for 24 hours.")
    user: UserRead


class RegisterResponse(SQLModel):
    """Profile of a newly registered user."""

    user: UserRead
