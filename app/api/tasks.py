"""Task CRUD endpoints with audited mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import AUTH_DEP, RECORDER_DEP, SESSION_DEP
from app.core.auth import AuthContext
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from app.services import tasks as tasks_service
from app.services.audit import AuditRecorder

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=DataResponse[list[TaskRead]])
async def list_tasks(
    session: AsyncSession = SESSION_DEP,
) -> DataResponse[list[TaskRead]]:
    """List all tasks with their owners."""
    return DataResponse(data=await tasks_service.list_tasks(session))


@router.post(
    "",
    response_model=DataResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    payload: TaskCreate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[TaskRead]:
    """Create a task."""
    task = await tasks_service.create_task(session, recorder, payload, actor_id=auth.actor_id)
    return DataResponse(data=task)


@router.put("/{task_id}", response_model=DataResponse[TaskRead])
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> DataResponse[TaskRead]:
    """Update a task."""
    task = await tasks_service.update_task(
        session,
        recorder,
        task_id,
        payload,
        actor_id=auth.actor_id,
    )
    return DataResponse(data=task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    session: AsyncSession = SESSION_DEP,
    recorder: AuditRecorder = RECORDER_DEP,
    auth: AuthContext = AUTH_DEP,
) -> MessageResponse:
    """Delete a task."""
    await tasks_service.delete_task(session, recorder, task_id, actor_id=auth.actor_id)
    return MessageResponse(message="Task deleted successfully")
