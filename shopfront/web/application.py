from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shopfront.log import configure_logging
from shopfront.settings import settings
from shopfront.web.api.errors import validation_error_handler
from shopfront.web.api.router import api_router
from shopfront.web.lifespan import lifespan_setup
from shopfront.web.observability import setup_prometheus, setup_tracing


def get_app() -> FastAPI:
    """
    Get FastAPI application.

    This is the main constructor of an application.

    :return: application.
    """
    configure_logging()
    app = FastAPI(
        title="shopfront",
        lifespan=lifespan_setup,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Main router for the API.
    app.include_router(router=api_router, prefix="/api")

    setup_tracing(app)
    if settings.environment != "pytest":
        setup_prometheus(app)

    return app
