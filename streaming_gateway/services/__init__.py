# =============================================================================
# Streaming Gateway - Services Package
# =============================================================================
"""Service layer: request handling and the Pub/Sub integration."""

from .ingestion import (
    BadRequest,
    IngestionError,
    IngestionHandler,
    PublishSummary,
    Unauthorized,
)
from .pubsub import (
    PubSubPublisher,
    PubSubPublishError,
    PublisherInitError,
    create_publisher,
)

__all__ = [
    "BadRequest",
    "IngestionError",
    "IngestionHandler",
    "PublishSummary",
    "Unauthorized",
    "PubSubPublisher",
    "PubSubPublishError",
    "PublisherInitError",
    "create_publisher",
]
