"""Bearer-token authentication dependencies for API routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.logging import get_logger
from app.core.security import TokenError, verify_token

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
_UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


@dataclass(frozen=True)
class AuthContext:
    """Authenticated actor resolved from a validated session token."""

    actor_id: str
    username: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_UNAUTHORIZED_HEADERS,
    )


async def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
) -> AuthContext:
    """Resolve the caller's identity from the bearer token or raise HTTP 401."""
    if credentials is None:
        if request.headers.get("Authorization"):
            raise _unauthorized("Invalid authorization header format")
        raise _unauthorized("Authorization header required")
    try:
        claims = verify_token(credentials.credentials)
    except TokenError as exc:
        logger.info(
            "auth.token.rejected path=%s reason=%s",
            request.url.path,
            str(exc),
        )
        raise _unauthorized("Invalid token") from exc
    return AuthContext(actor_id=claims.user_id, username=claims.username)
