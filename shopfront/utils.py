# ---- Custom exceptions ----
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from shopfront.db.base import Base

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])
M = TypeVar("M", bound=Base)


class ServiceError(Exception):
    """Base class for service errors."""


class NotFound(ServiceError):
    pass


class Conflict(ServiceError):
    pass


class BadRequest(ServiceError):
    """A business rule rejected the operation."""


# ---- Utilities ----
async def _get_or_404(session: AsyncSession, model: Type[M], pk: int) -> M:
    obj = await session.get(model, pk)
    if obj is None:
        raise NotFound(f"{model.__name__} with id={pk} not found")
    return obj


async def ensure_exists(
    session: AsyncSession,
    model: Type[M],
    pk: int,
    require_active: bool = True,
) -> M:
    """
    Return the row with primary key ``pk`` or raise NotFound.

    With ``require_active`` an inactive row counts as absent.
    """
    q = select(model).where(model.id == pk)
    if require_active:
        q = q.where(model.active.is_(True))
    result = await session.execute(q)
    obj = result.scalars().first()
    if obj is None:
        raise NotFound(f"{model.__name__} with id={pk} not found")
    return obj


async def ensure_unique(
    session: AsyncSession,
    model: Type[M],
    column: InstrumentedAttribute,
    value: Any,
    exclude_id: Optional[int] = None,
) -> None:
    """
    Raise Conflict if any row of ``model`` already holds ``value``.

    Inactive rows are checked too, so a soft-deleted record keeps its
    natural key reserved.
    """
    q = select(model.id).where(column == value)
    if exclude_id is not None:
        q = q.where(model.id != exclude_id)
    result = await session.execute(q.limit(1))
    if result.first() is not None:
        logger.warning(
            "{} rejected: {}={!r} already taken", model.__name__, column.key, value,
        )
        raise Conflict(f"{model.__name__} with {column.key} '{value}' already exists")


async def soft_delete(session: AsyncSession, obj: Base) -> None:
    obj.active = False
    session.add(obj)
    await session.flush()
    logger.info("{} id={} deactivated", type(obj).__name__, obj.id)
