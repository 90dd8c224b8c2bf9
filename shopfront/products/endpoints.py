from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.db.dependencies import get_db_session
from shopfront.products import services
from shopfront.products.schemas import ProductCreate, ProductOut, ProductUpdate
from shopfront.web.api.errors import translate_service_errors

router = APIRouter()


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
@translate_service_errors
async def create_product(
    payload: ProductCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Create a product under an existing, active category."""
    return await services.create_product(
        session,
        name=payload.name,
        description=payload.description,
        price=payload.price,
        stock=payload.stock,
        image_url=payload.image_url,
        category_id=payload.category_id,
    )


@router.get("", response_model=List[ProductOut])
@translate_service_errors
async def list_products(
    category_id: Optional[int] = Query(None, gt=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List active products, optionally only those of one category."""
    if category_id is not None:
        return await services.list_products_by_category(session, category_id)
    return await services.list_products(session)


@router.get("/{product_id}", response_model=ProductOut)
@translate_service_errors
async def get_product(
    product_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await services.get_product(session, product_id)


@router.patch("/{product_id}", response_model=ProductOut)
@translate_service_errors
async def patch_product(
    product_id: int,
    payload: ProductUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    data = payload.model_dump(exclude_unset=True)
    return await services.update_product(session, product_id, **data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
@translate_service_errors
async def deactivate_product(
    product_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    await services.deactivate_product(session, product_id)
