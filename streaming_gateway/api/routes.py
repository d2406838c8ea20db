"""
Streaming Gateway - Route Handlers

The ingestion endpoint at ``/`` plus a health check.
"""

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from .. import __version__
from ..config import Settings
from ..models import HealthResponse
from ..services import IngestionHandler


logger = structlog.get_logger(__name__)
router = APIRouter()

OK_BODY = '{"status":"ok"}'

# Every method reaches the handler; OPTIONS is answered as a CORS preflight
INGEST_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_handler(request: Request) -> IngestionHandler:
    """Return the handler built for this application."""
    handler = request.app.state.handler
    if handler is None:
        raise RuntimeError("Ingestion handler is not initialized")
    return handler


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Health check for load balancers."""
    return HealthResponse(service=settings.service_name, version=__version__)


@router.api_route("/", methods=INGEST_METHODS, tags=["Ingestion"])
async def ingest(request: Request) -> Response:
    """
    Publish a batch of events.

    Send ``Authorization: Bearer <token>`` and a JSON body such as
    ``{"data": [{"user": "a1", "action": "click"}]}``. Each event is
    published as its own message wrapped with an ``ingested_at``
    timestamp. Publishing is fire-and-forget: a 200 means the events were
    handed to the publisher, not that they were delivered.
    """
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    handler = get_handler(request)
    handler.authenticate(request.headers.get("authorization"))

    payload = handler.decode(await request.body())
    summary = handler.publish_all(payload.data)

    logger.info(
        "ingest_accepted",
        events=len(payload.data),
        submitted=summary.submitted,
        failed=summary.failed,
    )
    return Response(content=OK_BODY, media_type="application/json")
