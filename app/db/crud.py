"""Thin async CRUD helpers over SQLModel sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlmodel import SQLModel, col, select

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound=SQLModel)


async def get_by_id(session: AsyncSession, model: type[ModelT], obj_id: UUID) -> ModelT | None:
    """Load a row by primary key."""
    return await session.get(model, obj_id)


async def get_one_by(
    session: AsyncSession,
    model: type[ModelT],
    **filters: Any,
) -> ModelT | None:
    """Return the first row matching all equality filters."""
    statement = select(model)
    for field_name, value in filters.items():
        statement = statement.where(col(getattr(model, field_name)) == value)
    result = await session.exec(statement.limit(1))
    return result.first()


async def list_all(
    session: AsyncSession,
    model: type[ModelT],
    *,
    order_by: str | None = None,
) -> Sequence[ModelT]:
    """Return every row of `model`, optionally ordered by one column."""
    statement = select(model)
    if order_by is not None:
        statement = statement.order_by(col(getattr(model, order_by)))
    result = await session.exec(statement)
    return result.all()


async def save(session: AsyncSession, obj: ModelT) -> ModelT:
    """Insert or update `obj`, commit, and refresh it from the database."""
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


async def delete(session: AsyncSession, obj: SQLModel) -> None:
    """Delete `obj` and commit."""
    await session.delete(obj)
    await session.commit()
