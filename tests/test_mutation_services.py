# ruff: noqa: INP001, S101
"""Service-level behavior of audited mutations outside the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.db import crud
from app.schemas.positions import PositionCreate, PositionUpdate
from app.schemas.tasks import TaskCreate, TaskUpdate
from app.schemas.users import UserCreate
from app.services import positions as positions_service
from app.services import tasks as tasks_service
from app.services import users as users_service
from app.services.audit import AuditRecorder
from app.services.mutations import parse_entity_id


@dataclass
class _FakeAuditStore:
    documents: list[dict[str, Any]] = field(default_factory=list)

    async def append(self, document: dict[str, Any]) -> str:
        self.documents.append(document)
        return f"1-{len(self.documents)}"

    async def close(self) -> None:
        return None


async def _make_engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    return engine


@pytest.mark.asyncio
async def test_mutations_without_actor_are_not_recorded() -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            user = await users_service.create_user(
                session,
                recorder,
                UserCreate(name="Sys", username="sys", password="pw"),
                actor_id=None,
            )
            position = await positions_service.create_position(
                session,
                recorder,
                PositionCreate(name="Lead"),
                actor_id="",
            )
            await positions_service.update_position(
                session,
                recorder,
                str(position.id),
                PositionUpdate(name="Manager"),
                actor_id=None,
            )
            task = await tasks_service.create_task(
                session,
                recorder,
                TaskCreate(user_id=user.id, todo="nightly sync"),
                actor_id=None,
            )
            await tasks_service.delete_task(session, recorder, str(task.id), actor_id=None)
    finally:
        await engine.dispose()

    assert store.documents == []


@pytest.mark.asyncio
async def test_entity_store_failure_returns_500_and_skips_audit(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)

    async def _failing_save(session: AsyncSession, obj: Any) -> Any:
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(crud, "save", _failing_save)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            with pytest.raises(HTTPException) as exc_info:
                await positions_service.create_position(
                    session,
                    recorder,
                    PositionCreate(name="Lead"),
                    actor_id="actor-1",
                )
    finally:
        await engine.dispose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Failed to create position"
    assert store.documents == []


@pytest.mark.asyncio
async def test_update_ignores_null_fields() -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            position = await positions_service.create_position(
                session,
                recorder,
                PositionCreate(name="Lead"),
                actor_id="actor-1",
            )
            updated = await positions_service.update_position(
                session,
                recorder,
                str(position.id),
                PositionUpdate(name=None),
                actor_id="actor-1",
            )
    finally:
        await engine.dispose()

    assert updated.name == "Lead"
    update_doc = store.documents[-1]
    assert update_doc["meta"]["before"] == update_doc["meta"]["after"]


def test_parse_entity_id_rejects_garbage() -> None:
    with pytest.raises(HTTPException) as exc_info:
        parse_entity_id("42", label="user position")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Invalid user position ID"


async def _seed_task(
    session: AsyncSession,
    recorder: AuditRecorder,
) -> Any:
    owner = await users_service.create_user(
        session,
        recorder,
        UserCreate(name="Owner", username="owner", password="pw"),
        actor_id="actor-1",
    )
    return await tasks_service.create_task(
        session,
        recorder,
        TaskCreate(
            user_id=owner.id,
            todo="draft",
            start_date=datetime(2026, 3, 1, 9, 0),
            end_date=datetime(2026, 3, 2, 17, 0),
        ),
        actor_id="actor-1",
    )


@pytest.mark.asyncio
async def test_failed_update_returns_500_and_skips_audit(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            task = await _seed_task(session, recorder)
            recorded_before_failure = len(store.documents)

            async def _failing_save(session: AsyncSession, obj: Any) -> Any:
                raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

            monkeypatch.setattr(crud, "save", _failing_save)
            with pytest.raises(HTTPException) as exc_info:
                await tasks_service.update_task(
                    session,
                    recorder,
                    str(task.id),
                    TaskUpdate(todo="final"),
                    actor_id="actor-1",
                )
    finally:
        await engine.dispose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Failed to update task"
    assert len(store.documents) == recorded_before_failure
    assert all(doc["action"] == "CREATE" for doc in store.documents)


@pytest.mark.asyncio
async def test_failed_delete_returns_500_and_skips_audit(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            task = await _seed_task(session, recorder)
            recorded_before_failure = len(store.documents)

            async def _failing_delete(session: AsyncSession, obj: Any) -> None:
                raise OperationalError("DELETE", {}, Exception("disk I/O error"))

            monkeypatch.setattr(crud, "delete", _failing_delete)
            with pytest.raises(HTTPException) as exc_info:
                await tasks_service.delete_task(
                    session,
                    recorder,
                    str(task.id),
                    actor_id="actor-1",
                )
    finally:
        await engine.dispose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Failed to delete task"
    assert len(store.documents) == recorded_before_failure
    assert not any(doc["action"] == "DELETE" for doc in store.documents)


@pytest.mark.asyncio
async def test_update_snapshots_differ_only_in_changed_fields() -> None:
    store = _FakeAuditStore()
    recorder = AuditRecorder(store, timeout_seconds=1.0)
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            task = await _seed_task(session, recorder)
            await tasks_service.update_task(
                session,
                recorder,
                str(task.id),
                TaskUpdate(todo="final"),
                actor_id="actor-1",
            )
    finally:
        await engine.dispose()

    update_doc = store.documents[-1]
    assert update_doc["action"] == "UPDATE"
    before = update_doc["meta"]["before"]
    after = update_doc["meta"]["after"]
    assert before.keys() == after.keys()
    assert {key for key in before if before[key] != after[key]} == {"todo"}
    assert before["todo"] == "draft"
    assert after["todo"] == "final"
    for unchanged in ("id", "user_id", "start_date", "end_date"):
        assert before[unchanged] == after[unchanged]
