from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from shopfront.db.models import load_all_models
from shopfront.settings import settings
from shopfront.web.observability import stop_tracing, trace_engine


@asynccontextmanager
async def lifespan_setup(
    app: FastAPI,
) -> AsyncGenerator[None, None]:  # pragma: no cover
    """
    Keep one engine open for the lifetime of the app.

    The session factory lands on ``app.state`` where
    ``get_db_session`` picks it up per request.

    :param app: the fastAPI application.
    """
    load_all_models()
    engine = create_async_engine(
        str(settings.db_url), echo=settings.db_echo, pool_pre_ping=True,
    )
    app.state.db_engine = engine
    app.state.db_session_factory = async_sessionmaker(engine, expire_on_commit=False)
    trace_engine(app, engine)
    logger.info("Database engine ready ({})", settings.db_url.scheme)

    try:
        yield
    finally:
        stop_tracing(app)
        await engine.dispose()
        logger.info("Database engine disposed")
