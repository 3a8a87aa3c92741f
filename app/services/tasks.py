"""Task lookup and audited mutation services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger
from app.db import crud
from app.models.tasks import Task
from app.models.users import User
from app.schemas.tasks import TaskRead
from app.services.mutations import load_or_404, parse_entity_id, persist, remove
from app.services.snapshots import snapshot
from app.services.users import to_user_read

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.schemas.tasks import TaskCreate, TaskUpdate
    from app.services.audit import AuditRecorder

AUDIT_ENTITY = "tasks"

logger = get_logger(__name__)


def to_task_read(task: Task, owner: User | None) -> TaskRead:
    read = TaskRead.model_validate(task, from_attributes=True)
    if owner is not None:
        read.user = to_user_read(owner)
    return read


async def _require_owner(session: AsyncSession, user_id: UUID) -> User:
    owner = await crud.get_by_id(session, User, user_id)
    if owner is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")
    return owner


async def list_tasks(session: AsyncSession) -> list[TaskRead]:
    """Return all tasks with their owners embedded."""
    try:
        tasks = await crud.list_all(session, Task, order_by="todo")
        owners = {user.id: user for user in await crud.list_all(session, User)}
    except SQLAlchemyError as exc:
        logger.exception("entity_store.read_failed entity=Task")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch tasks",
        ) from exc
    return [to_task_read(task, owners.get(task.user_id)) for task in tasks]


async def create_task(
    session: AsyncSession,
    recorder: AuditRecorder,
    payload: TaskCreate,
    *,
    actor_id: str | None,
) -> TaskRead:
    """Create a task for an existing user and audit the creation."""
    owner = await _require_owner(session, payload.user_id)
    task = await persist(
        session,
        Task.model_validate(payload.model_dump()),
        failure_detail="Failed to create task",
        conflict_detail="Task conflicts with an existing task",
    )
    if actor_id:
        await recorder.record_create(actor_id, AUDIT_ENTITY, str(task.id), snapshot(task))
    return to_task_read(task, owner)


async def update_task(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_task_id: str,
    payload: TaskUpdate,
    *,
    actor_id: str | None,
) -> TaskRead:
    """Apply a partial update to a task and audit before/after state."""
    task_id = parse_entity_id(raw_task_id, label="task")
    task = await load_or_404(session, Task, task_id, label="task")
    before = snapshot(task)

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "user_id" in updates:
        await _require_owner(session, updates["user_id"])
    for field_name, value in updates.items():
        setattr(task, field_name, value)

    task = await persist(
        session,
        task,
        failure_detail="Failed to update task",
        conflict_detail="Task conflicts with an existing task",
    )
    if actor_id:
        await recorder.record_update(actor_id, AUDIT_ENTITY, str(task.id), before, snapshot(task))
    return to_task_read(task, await crud.get_by_id(session, User, task.user_id))


async def delete_task(
    session: AsyncSession,
    recorder: AuditRecorder,
    raw_task_id: str,
    *,
    actor_id: str | None,
) -> None:
    """Delete a task and audit its final state."""
    task_id = parse_entity_id(raw_task_id, label="task")
    task = await load_or_404(session, Task, task_id, label="task")
    before = snapshot(task)
    await remove(
        session,
        task,
        failure_detail="Failed to delete task",
        conflict_detail="Task is still referenced",
    )
    if actor_id:
        await recorder.record_delete(actor_id, AUDIT_ENTITY, str(task_id), before)
