"""Entity tables; importing this package registers them on `metadata`."""

from sqlmodel import SQLModel

from app.models.positions import Position
from app.models.tasks import Task
from app.models.user_positions import UserPosition
from app.models.users import User

metadata = SQLModel.metadata

__all__ = [
    "Position",
    "Task",
    "User",
    "UserPosition",
    "metadata",
]
