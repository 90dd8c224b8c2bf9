from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.db.dependencies import get_db_session
from shopfront.users import services
from shopfront.users.schemas import UserCreate, UserOut, UserUpdate
from shopfront.web.api.errors import translate_service_errors

router = APIRouter()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@translate_service_errors
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Public signup endpoint."""
    return await services.create_user(
        session,
        email=str(payload.email),
        password=payload.password,
        given_name=payload.given_name,
        family_name=payload.family_name,
    )


@router.get("", response_model=List[UserOut])
@translate_service_errors
async def list_users(session: AsyncSession = Depends(get_db_session)):
    return await services.list_users(session)


@router.get("/{user_id}", response_model=UserOut)
@translate_service_errors
async def get_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await services.get_user(session, user_id)


@router.patch("/{user_id}", response_model=UserOut)
@translate_service_errors
async def patch_user(
    user_id: int,
    payload: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    data = payload.model_dump(exclude_unset=True)
    if "email" in data:
        data["email"] = str(data["email"])
    return await services.update_user(session, user_id, **data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
@translate_service_errors
async def deactivate_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Soft delete: the account is kept but no longer listed."""
    await services.deactivate_user(session, user_id)
