import os
from typing import AsyncGenerator

os.environ["SHOPFRONT_ENVIRONMENT"] = "pytest"

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from shopfront.db.meta import meta  # noqa: E402
from shopfront.db.models import load_all_models  # noqa: E402
from shopfront.web.application import get_app  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """
    Backend for anyio pytest plugin.

    :return: backend name.
    """
    return "asyncio"


@pytest.fixture
async def _engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an in-memory database with every table.

    :yield: new engine.
    """
    load_all_models()
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(meta.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(_engine, expire_on_commit=False)


@pytest.fixture
async def dbsession(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for calling services directly.

    :yield: async session.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def fastapi_app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """
    Fixture for creating FastAPI app.

    :return: fastapi app wired to the test database.
    """
    application = get_app()
    application.state.db_session_factory = session_factory
    return application


@pytest.fixture
async def client(fastapi_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Fixture that creates client for requesting server.

    :param fastapi_app: the application.
    :yield: client for the app.
    """
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
