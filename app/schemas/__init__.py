"""Public schema exports shared across API route modules."""

from app.schemas.audit import AuditAction, AuditMeta, AuditRecord
from app.schemas.auth import LoginRequest, LoginResponse, RegisterResponse
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.positions import PositionCreate, PositionRead, PositionUpdate
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from app.schemas.user_positions import UserPositionCreate, UserPositionRead
from app.schemas.users import UserCreate, UserRead, UserUpdate

__all__ = [
    "AuditAction",
    "AuditMeta",
    "AuditRecord",
    "DataResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "PositionCreate",
    "PositionRead",
    "PositionUpdate",
    "RegisterResponse",
    "TaskCreate",
    "TaskRead",
    "TaskUpdate",
    "UserCreate",
    "UserPositionCreate",
    "UserPositionRead",
    "UserRead",
    "UserUpdate",
]
