"""Password hashing and signed session token helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from app.core.config import settings
from app.core.time import utcnow

JWT_ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=24)


class TokenError(Exception):
    """Raised when a session token is malformed, expired, or badly signed."""


@dataclass(frozen=True)
class TokenClaims:
    """Validated claims carried by a session token."""

    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return whether `password` matches the stored bcrypt digest."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed digest (e.g. legacy plaintext row).
        return False


def issue_token(user_id: str, username: str, *, now: datetime | None = None) -> str:
    """Issue an HS256 session token that expires after 24 hours."""
    issued_at = now or utcnow()
    payload = {
        "sub": user_id,
        "user_id": user_id,
        "username": username,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + TOKEN_TTL).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """Decode and validate a session token, raising `TokenError` on failure."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc

    user_id = payload.get("user_id") or payload.get("sub")
    username = payload.get("username")
    if not isinstance(user_id, str) or not user_id or not isinstance(username, str):
        raise TokenError("Invalid token claims")
    return TokenClaims(
        user_id=user_id,
        username=username,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
