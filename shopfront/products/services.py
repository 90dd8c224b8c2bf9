from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shopfront.categories.models import Category
from shopfront.products.models import Product
from shopfront.utils import NotFound, ensure_exists, soft_delete


def _select_products():
    """
    Every product read goes through here so the category is always
    fetched alongside the product.
    """
    return (
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.active.is_(True))
        .execution_options(populate_existing=True)
    )


async def _get_active_category(session: AsyncSession, category_id: int) -> Category:
    return await ensure_exists(session, Category, category_id, require_active=True)


async def create_product(
    session: AsyncSession,
    *,
    name: str,
    price: Decimal,
    stock: int,
    category_id: int,
    description: Optional[str] = None,
    image_url: Optional[str] = None,
) -> Product:
    # validate category exists and is active
    category = await _get_active_category(session, category_id)
    product = Product(
        name=name,
        description=description,
        price=price,
        stock=stock,
        image_url=image_url,
        category_id=category.id,
        active=True,
    )
    session.add(product)
    await session.flush()
    logger.info("Product id={} created in category id={}", product.id, category.id)
    return await get_product(session, product.id)


async def list_products(session: AsyncSession) -> List[Product]:
    result = await session.execute(_select_products().order_by(Product.id))
    return list(result.scalars().all())


async def list_products_by_category(
    session: AsyncSession,
    category_id: int,
) -> List[Product]:
    """
    Active products filed under ``category_id``.

    An unknown category is not an error, it simply has no products.
    """
    q = _select_products().where(Product.category_id == category_id).order_by(Product.id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_product(session: AsyncSession, product_id: int) -> Product:
    result = await session.execute(_select_products().where(Product.id == product_id))
    product = result.scalars().first()
    if product is None:
        raise NotFound(f"Product with id={product_id} not found")
    return product


async def update_product(session: AsyncSession, product_id: int, **patch) -> Product:
    product = await ensure_exists(session, Product, product_id)

    category_id = patch.pop("category_id", None)
    if category_id is not None:
        category = await _get_active_category(session, category_id)
        product.category_id = category.id

    for k, v in patch.items():
        if hasattr(product, k):
            setattr(product, k, v)

    session.add(product)
    await session.flush()
    logger.info("Product id={} updated", product.id)
    return await get_product(session, product.id)


async def deactivate_product(session: AsyncSession, product_id: int) -> None:
    product = await ensure_exists(session, Product, product_id)
    await soft_delete(session, product)
