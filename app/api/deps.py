"""Reusable FastAPI dependencies for entity routers.

Routers compose these instead of constructing sessions, recorders, or auth
contexts themselves, so tests can swap any of them through
`app.dependency_overrides`.
"""

from __future__ import annotations

from fastapi import Depends

from app.core.auth import get_auth_context
from app.db.session import get_session
from app.services.audit import get_audit_recorder

AUTH_DEP = Depends(get_auth_context)
SESSION_DEP = Depends(get_session)
RECORDER_DEP = Depends(get_audit_recorder)
