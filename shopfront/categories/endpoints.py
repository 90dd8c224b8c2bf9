from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.categories import services
from shopfront.categories.schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryWithProductsOut,
)
from shopfront.db.dependencies import get_db_session
from shopfront.web.api.errors import translate_service_errors

router = APIRouter()


@router.post(
    "",
    response_model=CategoryWithProductsOut,
    status_code=status.HTTP_201_CREATED,
)
@translate_service_errors
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_db_session),
):
    return await services.create_category(
        session,
        name=payload.name,
        description=payload.description,
    )


@router.get("", response_model=List[CategoryWithProductsOut])
@translate_service_errors
async def list_categories(session: AsyncSession = Depends(get_db_session)):
    """List active categories, each with its active products."""
    return await services.list_categories(session)


@router.get("/{category_id}", response_model=CategoryWithProductsOut)
@translate_service_errors
async def get_category(
    category_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await services.get_category(session, category_id)


@router.patch("/{category_id}", response_model=CategoryWithProductsOut)
@translate_service_errors
async def patch_category(
    category_id: int,
    payload: CategoryUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    data = payload.model_dump(exclude_unset=True)
    return await services.update_category(session, category_id, **data)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
@translate_service_errors
async def deactivate_category(
    category_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Refused with 400 while the category still has active products."""
    await services.deactivate_category(session, category_id)
