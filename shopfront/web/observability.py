import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    TELEMETRY_SDK_LANGUAGE,
    Resource,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import set_tracer_provider
from prometheus_fastapi_instrumentator.instrumentation import (
    PrometheusFastApiInstrumentator,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from shopfront.settings import settings


def _tracer_provider() -> Optional[TracerProvider]:
    if not settings.opentelemetry_endpoint:
        return None

    provider = TracerProvider(
        resource=Resource(
            attributes={
                SERVICE_NAME: "shopfront",
                TELEMETRY_SDK_LANGUAGE: "python",
                DEPLOYMENT_ENVIRONMENT: settings.environment,
            },
        ),
    )
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=settings.opentelemetry_endpoint, insecure=True),
        ),
    )
    return provider


def setup_tracing(app: FastAPI) -> None:  # pragma: no cover
    """
    Trace requests and log records when an OTLP endpoint is configured.

    Must run before the app starts, since it adds middleware.

    :param app: application with its routes already included.
    """
    provider = _tracer_provider()
    app.state.tracer_provider = provider
    if provider is None:
        return

    quiet_paths = [
        app.url_path_for("health_check"),
        app.openapi_url,
        app.docs_url,
        app.redoc_url,
        "/metrics",
    ]
    FastAPIInstrumentor().instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls=",".join(path for path in quiet_paths if path),
    )
    LoggingInstrumentor().instrument(
        tracer_provider=provider,
        set_logging_format=True,
        log_level=logging.getLevelName(settings.log_level.value),
    )
    set_tracer_provider(tracer_provider=provider)


def trace_engine(app: FastAPI, engine: AsyncEngine) -> None:  # pragma: no cover
    """Add SQL spans once the engine exists."""
    provider = getattr(app.state, "tracer_provider", None)
    if provider is None:
        return
    SQLAlchemyInstrumentor().instrument(
        tracer_provider=provider,
        engine=engine.sync_engine,
    )


def stop_tracing(app: FastAPI) -> None:  # pragma: no cover
    if getattr(app.state, "tracer_provider", None) is None:
        return
    FastAPIInstrumentor().uninstrument_app(app)
    SQLAlchemyInstrumentor().uninstrument()
    LoggingInstrumentor().uninstrument()


def setup_prometheus(app: FastAPI) -> None:  # pragma: no cover
    """
    Expose request metrics on ``/metrics``.

    :param app: current application.
    """
    PrometheusFastApiInstrumentator(should_group_status_codes=False).instrument(
        app,
    ).expose(app, should_gzip=True, name="prometheus_metrics")
