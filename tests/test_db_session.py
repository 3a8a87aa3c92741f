# ruff: noqa: INP001, S101
"""Entity store session helpers."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from sqlalchemy.exc import OperationalError

from app.db import session as session_module
from app.db.session import engine_url, rollback_quietly
from app.models import metadata


@dataclass
class _FakeSession:
    in_txn: bool = False
    fail_rollback: bool = False
    rollbacks: int = 0

    def in_transaction(self) -> bool:
        return self.in_txn

    async def rollback(self) -> None:
        self.rollbacks += 1
        if self.fail_rollback:
            raise OperationalError("ROLLBACK", {}, Exception("connection lost"))

    async def __aenter__(self) -> _FakeSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgresql://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgres://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+psycopg://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_engine_url_selects_async_driver(raw: str, expected: str) -> None:
    assert engine_url(raw) == expected


def test_metadata_registers_entity_tables() -> None:
    assert {"users", "tasks", "positions", "user_positions"} <= set(metadata.tables)


@pytest.mark.asyncio
async def test_rollback_quietly_logs_instead_of_raising(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    logged: list[str] = []
    monkeypatch.setattr(
        session_module.logger,
        "exception",
        lambda message, *a, **k: logged.append(message),
    )
    fake = _FakeSession(fail_rollback=True)

    await rollback_quietly(fake)  # type: ignore[arg-type]

    assert fake.rollbacks == 1
    assert logged == ["entity_store.rollback_failed"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("in_txn", "expected_rollbacks"), [(True, 1), (False, 0)])
async def test_get_session_rolls_back_open_transaction(
    monkeypatch: pytest.MonkeyPatch,
    in_txn: bool,
    expected_rollbacks: int,
) -> None:
    fake = _FakeSession(in_txn=in_txn)
    monkeypatch.setattr(session_module, "session_factory", lambda: fake)

    sessions = session_module.get_session()
    assert await anext(sessions) is fake
    with pytest.raises(StopAsyncIteration):
        await anext(sessions)

    assert fake.rollbacks == expected_rollbacks
