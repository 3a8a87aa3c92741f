"""Entity store engine, request sessions, and schema bootstrap."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import BACKEND_ROOT, settings
from app.core.logging import get_logger
from app.models import metadata

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

logger = get_logger(__name__)

ALEMBIC_INI = BACKEND_ROOT / "alembic.ini"


def engine_url(database_url: str) -> str:
    """Pin bare `postgresql://` URLs to the async psycopg driver."""
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+psycopg://" + database_url.removeprefix(prefix)
    return database_url


engine = create_async_engine(engine_url(settings.database_url), pool_pre_ping=True)
session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def rollback_quietly(session: AsyncSession) -> None:
    """Roll back `session`, logging instead of raising if the rollback itself fails."""
    try:
        await session.rollback()
    except SQLAlchemyError:
        logger.exception("entity_store.rollback_failed")


def upgrade_schema(ini_path: Path = ALEMBIC_INI) -> None:
    """Apply Alembic revisions up to head."""
    alembic_cfg = Config(str(ini_path))
    alembic_cfg.attributes["configure_logger"] = False
    logger.info("entity_store.migrations.started")
    command.upgrade(alembic_cfg, "head")
    logger.info("entity_store.migrations.completed")


async def init_db() -> None:
    """Bring the schema up to date: migrations when enabled, else `create_all`."""
    if settings.db_auto_migrate:
        await asyncio.to_thread(upgrade_schema)
        return
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def dispose_db() -> None:
    """Close pooled connections."""
    await engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; an open transaction is rolled back on exit."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await rollback_quietly(session)
