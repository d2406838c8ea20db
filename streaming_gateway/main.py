# =============================================================================
# Streaming Gateway - Main Application
# =============================================================================
"""
Streaming Gateway

An authenticated HTTP endpoint that accepts batches of JSON events, stamps
each one with its ingestion time and publishes it as an individual message
to Google Cloud Pub/Sub.

Key Features:
- Shared-secret bearer authentication
- Schema-free: events are forwarded exactly as received
- Fire-and-forget: responds without waiting for publish acknowledgments
- Observable: Structured logging for debugging and monitoring
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from . import __version__
from .api import router
from .config import Settings, get_settings
from .services import (
    IngestionError,
    IngestionHandler,
    PubSubPublisher,
    PublisherInitError,
    create_publisher,
)


# =============================================================================
# Logging Configuration
# =============================================================================

def configure_logging(settings: Settings) -> None:
    """
    Configure structured logging with structlog.

    Sets up JSON-formatted logs suitable for Cloud Logging
    and local development.
    """
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    publisher: Optional[PubSubPublisher] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; read from the environment if omitted
        publisher: Publisher to use; built from the settings at startup if
            omitted, in which case a construction failure aborts startup

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings)
    logger = structlog.get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.handler is None:
            app.state.publisher = create_publisher(settings)
            app.state.handler = IngestionHandler(settings, app.state.publisher)
        logger.info("startup_complete", message="Gateway ready to accept requests")

        yield

        logger.info("shutdown_initiated", message="Gateway shutting down")
        app.state.publisher.stop()

    app = FastAPI(
        title="Streaming Gateway",
        description="""
## Overview

Authenticated ingestion endpoint that forwards JSON events to Pub/Sub.

## Usage

`POST /` with `Authorization: Bearer <token>` and a body of the form
`{"data": [{...}, {...}]}`. Each event is published as one message:
`{"ingested_at": "<RFC 3339 UTC>", "payload": {...}}`.
        """,
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.publisher = publisher
    app.state.handler = (
        IngestionHandler(settings, publisher) if publisher is not None else None
    )

    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.exception_handler(IngestionError)
    async def ingestion_error_handler(request: Request, exc: IngestionError) -> Response:
        logger.info(
            "ingest_rejected",
            status_code=exc.status_code,
            reason=exc.message,
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    # Runs in ServerErrorMiddleware, outside allow_any_origin
    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return PlainTextResponse(
            "Internal Server Error",
            status_code=500,
            headers={"Access-Control-Allow-Origin": "*"},
        )

    app.include_router(router)

    logger.info(
        "application_startup",
        service=settings.service_name,
        environment=settings.environment,
        project_id=settings.project_id,
        topic=settings.topic_name,
    )

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# Entry Point
# =============================================================================

def run() -> None:
    """
    Serve the gateway with uvicorn.

    The publisher is built before serving so that a bad project or missing
    credentials stop the process instead of starting a half-working server.
    """
    settings = get_settings()
    configure_logging(settings)
    logger = structlog.get_logger(__name__)

    try:
        publisher = create_publisher(settings)
    except PublisherInitError as e:
        logger.critical("startup_aborted", error=str(e))
        raise SystemExit(1) from e

    uvicorn.run(
        create_app(settings, publisher),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
