from __future__ import annotations

from typing import List, Optional

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shopfront.categories.models import Category
from shopfront.products.models import Product
from shopfront.utils import (
    BadRequest,
    Conflict,
    NotFound,
    _get_or_404,
    ensure_exists,
    ensure_unique,
    soft_delete,
)


def _select_categories():
    """Active categories with their active products attached."""
    return (
        select(Category)
        .options(
            selectinload(Category.products.and_(Product.active.is_(True))),
        )
        .where(Category.active.is_(True))
        .execution_options(populate_existing=True)
    )


async def _flush_or_conflict(session: AsyncSession, name: str) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        raise Conflict(f"Category with name '{name}' already exists") from exc


async def create_category(
    session: AsyncSession,
    *,
    name: str,
    description: Optional[str] = None,
) -> Category:
    await ensure_unique(session, Category, Category.name, name)
    category = Category(name=name, description=description, active=True)
    session.add(category)
    await _flush_or_conflict(session, name)
    logger.info("Category id={} created", category.id)
    return await get_category(session, category.id)


async def list_categories(session: AsyncSession) -> List[Category]:
    result = await session.execute(_select_categories().order_by(Category.id))
    return list(result.scalars().all())


async def get_category(session: AsyncSession, category_id: int) -> Category:
    result = await session.execute(
        _select_categories().where(Category.id == category_id),
    )
    category = result.scalars().first()
    if category is None:
        raise NotFound(f"Category with id={category_id} not found")
    return category


async def update_category(session: AsyncSession, category_id: int, **patch) -> Category:
    category = await ensure_exists(session, Category, category_id)

    name = patch.get("name")
    if name is not None and name != category.name:
        await ensure_unique(session, Category, Category.name, name, exclude_id=category.id)

    for k, v in patch.items():
        if hasattr(category, k):
            setattr(category, k, v)

    session.add(category)
    await _flush_or_conflict(session, category.name)
    logger.info("Category id={} updated ({})", category.id, ", ".join(sorted(patch)))
    return await get_category(session, category.id)


async def count_active_products(session: AsyncSession, category_id: int) -> int:
    q = select(func.count(Product.id)).where(
        Product.category_id == category_id,
        Product.active.is_(True),
    )
    result = await session.execute(q)
    return result.scalar_one()


async def deactivate_category(session: AsyncSession, category_id: int) -> None:
    """
    Soft delete a category.

    Refused while the category still has active products.
    """
    category = await _get_or_404(session, Category, category_id)
    active_products = await count_active_products(session, category.id)
    if active_products > 0:
        logger.warning(
            "Category id={} not deactivated: {} active product(s)",
            category.id,
            active_products,
        )
        raise BadRequest(
            f"Category with id={category.id} cannot be deactivated: "
            f"it has {active_products} active product(s)",
        )
    await soft_delete(session, category)
