from __future__ import annotations

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.users import security
from shopfront.users.models import User
from shopfront.utils import Conflict, ensure_exists, ensure_unique, soft_delete


async def _flush_or_conflict(session: AsyncSession, email: str) -> None:
    try:
        await session.flush()  # push so integrity errors surface
    except IntegrityError as exc:
        raise Conflict(f"User with email '{email}' already exists") from exc


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    given_name: str,
    family_name: str,
) -> User:
    """Creates a new user with a hashed password."""
    await ensure_unique(session, User, User.email, email)
    user = User(
        email=email,
        password=security.get_password_hash(password),
        given_name=given_name,
        family_name=family_name,
        active=True,
    )
    session.add(user)
    await _flush_or_conflict(session, email)
    await session.refresh(user)
    logger.info("User id={} created", user.id)
    return user


async def list_users(session: AsyncSession) -> List[User]:
    q = select(User).where(User.active.is_(True)).order_by(User.id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_user(session: AsyncSession, user_id: int) -> User:
    return await ensure_exists(session, User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email)
    result = await session.execute(q)
    return result.scalars().first()


async def update_user(session: AsyncSession, user_id: int, **patch) -> User:
    """Updates a user. Hashes the password if it's being changed."""
    user = await get_user(session, user_id)

    email = patch.get("email")
    if email is not None and email != user.email:
        await ensure_unique(session, User, User.email, email, exclude_id=user.id)

    for k, v in patch.items():
        if k == "password":
            user.password = security.get_password_hash(v)
        elif hasattr(user, k):
            setattr(user, k, v)

    session.add(user)
    await _flush_or_conflict(session, user.email)
    await session.refresh(user)
    logger.info("User id={} updated ({})", user.id, ", ".join(sorted(patch)))
    return user


async def deactivate_user(session: AsyncSession, user_id: int) -> None:
    user = await get_user(session, user_id)
    await soft_delete(session, user)
