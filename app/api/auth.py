"""Login and registration endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, status

from app.api.deps import SESSION_DEP
from app.core.logging import get_logger
from app.core.security import issue_token, verify_password
from app.db import crud
from app.models.users import User
from app.schemas.auth import LoginRequest, LoginResponse, RegisterResponse
from app.schemas.errors import ErrorResponse
from app.schemas.users import UserCreate
from app.services.users import insert_user, to_user_read

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log In",
    description="Exchange a username and password for a 24-hour bearer token.",
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
async def login(payload: LoginRequest, session: AsyncSession = SESSION_DEP) -> LoginResponse:
    """Verify credentials and issue a session token."""
    user = await crud.get_one_by(session, User, username=payload.username)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("auth.login.rejected username_known=%s", user is not None)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    token = issue_token(str(user.id), user.username)
    logger.info("auth.login.succeeded user_id=%s", user.id)
    return LoginResponse(token=token, user=to_user_read(user))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account. Registration is not recorded in the audit trail.",
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
)
async def register(payload: UserCreate, session: AsyncSession = SESSION_DEP) -> RegisterResponse:
    """Create a user without an authenticated actor."""
    user = await insert_user(session, payload)
    return RegisterResponse(user=to_user_read(user))
