# =============================================================================
# Streaming Gateway - Ingestion Handler
# =============================================================================
"""
Core request handling: authenticate, decode, enrich and publish.

The handler is stateless across requests. It only holds the settings and
the publisher it was built with, both shared read-only by every request.
"""

import hmac
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import structlog
from pydantic import JsonValue, ValidationError

from ..config import Settings
from ..models import EnvelopeMessage, IngestionRequest, utc_now
from .pubsub import PubSubPublisher


logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


class IngestionError(Exception):
    """Client error that ends a request with a plain-text response."""

    status_code = 500
    message = "Internal Server Error"


class Unauthorized(IngestionError):
    status_code = 401
    message = "Unauthorized"


class BadRequest(IngestionError):
    status_code = 400
    message = "Invalid JSON"


@dataclass
class PublishSummary:
    """Outcome of submitting one request's events."""

    submitted: int = 0
    failed: int = 0


class IngestionHandler:
    """
    Turns an authenticated ingestion request into Pub/Sub messages.

    Args:
        settings: Application settings holding the shared secret
        publisher: Publisher bound to the destination topic
        clock: Source of the current UTC time
    """

    def __init__(
        self,
        settings: Settings,
        publisher: PubSubPublisher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._api_key = settings.api_key.encode("utf-8")
        self._publisher = publisher
        self._clock = clock

    def authenticate(self, authorization: Optional[str]) -> None:
        """
        Check the ``Authorization`` header against the shared secret.

        Raises:
            Unauthorized: Header missing, not a bearer token, or wrong token
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise Unauthorized()

        token = authorization[len(BEARER_PREFIX):].encode("utf-8")
        if not token or not hmac.compare_digest(token, self._api_key):
            raise Unauthorized()

    def decode(self, body: bytes) -> IngestionRequest:
        """
        Parse a request body of the form ``{"data": [{...}, ...]}``.

        Raises:
            BadRequest: Body is not JSON or does not have that shape
        """
        try:
            return IngestionRequest.model_validate_json(body)
        except ValidationError as e:
            logger.warning("ingest_invalid_body", errors=e.error_count())
            raise BadRequest() from e

    def publish_all(self, events: Sequence[dict[str, JsonValue]]) -> PublishSummary:
        """
        Wrap each event in an envelope and submit it, in input order.

        Never waits on a publish result and never stops early.
        """
        summary = PublishSummary()
        for index, event in enumerate(events):
            envelope = EnvelopeMessage.wrap(event, self._clock())
            try:
                self._publisher.submit(envelope)
            except Exception as e:
                # Known gap: the caller still gets 200 when a submission fails.
                # The failure is only visible in the logs and the summary.
                summary.failed += 1
                logger.warning(
                    "publish_submit_failed",
                    index=index,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            summary.submitted += 1
        return summary
