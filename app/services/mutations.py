"""Shared plumbing for entity mutation services.

Mutation services follow one shape: resolve the target, snapshot it, write to
the entity store, snapshot the result, then hand both snapshots to the audit
recorder. The helpers here cover the parts that are identical across entity
types: identifier parsing and mapping entity-store failures onto HTTP errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel

from app.core.logging import get_logger
from app.db import crud
from app.db.session import rollback_quietly

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound=SQLModel)

logger = get_logger(__name__)


def parse_entity_id(raw: str, *, label: str) -> UUID:
    """Parse a path identifier or raise HTTP 400 `Invalid <label> ID`."""
    try:
        return UUID(raw)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} ID",
        ) from exc


async def persist(
    session: AsyncSession,
    obj: ModelT,
    *,
    failure_detail: str,
    conflict_detail: str,
) -> ModelT:
    """Commit `obj`, mapping uniqueness violations to 409 and other failures to 500."""
    try:
        return await crud.save(session, obj)
    except IntegrityError as exc:
        await rollback_quietly(session)
        logger.info(
            "entity_store.conflict entity=%s error=%s",
            type(obj).__name__,
            str(exc.orig)[:200],
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail) from exc
    except SQLAlchemyError as exc:
        await rollback_quietly(session)
        logger.exception("entity_store.write_failed entity=%s", type(obj).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        ) from exc


async def remove(
    session: AsyncSession,
    obj: SQLModel,
    *,
    failure_detail: str,
    conflict_detail: str,
) -> None:
    """Delete `obj`, mapping still-referenced rows to 409 and other failures to 500."""
    try:
        await crud.delete(session, obj)
    except IntegrityError as exc:
        await rollback_quietly(session)
        logger.info(
            "entity_store.conflict entity=%s error=%s",
            type(obj).__name__,
            str(exc.orig)[:200],
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail) from exc
    except SQLAlchemyError as exc:
        await rollback_quietly(session)
        logger.exception("entity_store.delete_failed entity=%s", type(obj).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        ) from exc


async def load_or_404(
    session: AsyncSession,
    model: type[ModelT],
    obj_id: UUID,
    *,
    label: str,
) -> ModelT:
    """Load a row by id or raise HTTP 404 `<Label> not found`; read failures become 500."""
    try:
        obj = await crud.get_by_id(session, model, obj_id)
    except SQLAlchemyError as exc:
        logger.exception("entity_store.read_failed entity=%s", model.__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch {label}",
        ) from exc
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label.capitalize()} not found",
        )
    return obj
