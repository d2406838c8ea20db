# =============================================================================
# Streaming Gateway - Pub/Sub Publisher Service
# =============================================================================
"""
Google Cloud Pub/Sub publisher service.

Owns the long-lived publisher client for one topic. Submissions are
fire-and-forget: ``submit`` hands the serialized envelope to the client,
which batches and sends it from its own background threads, and returns
the publish future without waiting on it. Delivery failures are only
observed by a done-callback that logs them.
"""

from concurrent.futures import Future
from typing import Optional

import structlog
from google.cloud import pubsub_v1

from ..config import Settings
from ..models import EnvelopeMessage


# Configure structured logger
logger = structlog.get_logger(__name__)


class PublisherInitError(Exception):
    """Raised when the Pub/Sub client cannot be created."""


class PubSubPublishError(Exception):
    """Raised when a message cannot be handed to the Pub/Sub client."""


class PubSubPublisher:
    """
    Fire-and-forget Pub/Sub publisher bound to a single topic.

    The underlying ``PublisherClient`` is thread-safe, so one instance is
    shared by every concurrent request.

    Attributes:
        project_id: GCP project identifier
        topic_id: Pub/Sub topic name
    """

    def __init__(
        self,
        project_id: str,
        topic_id: str,
        client: Optional[pubsub_v1.PublisherClient] = None,
    ) -> None:
        """
        Create the publisher client and resolve the topic path.

        Args:
            project_id: GCP project identifier
            topic_id: Pub/Sub topic name
            client: Pre-built client, mainly for tests

        Raises:
            PublisherInitError: If the client cannot be constructed
                (missing credentials, bad project, ...)
        """
        self.project_id = project_id
        self.topic_id = topic_id
        self._stopped = False

        try:
            self._client = client if client is not None else pubsub_v1.PublisherClient()
            self._topic_path = self._client.topic_path(project_id, topic_id)
        except Exception as e:
            logger.error(
                "publisher_init_failed",
                project_id=project_id,
                topic_id=topic_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PublisherInitError(
                f"Failed to create Pub/Sub publisher: {e}"
            ) from e

        logger.info(
            "publisher_initialized",
            project_id=project_id,
            topic_id=topic_id,
            topic_path=self._topic_path,
        )

    @property
    def topic_path(self) -> str:
        return self._topic_path

    def submit(self, message: EnvelopeMessage) -> Future:
        """
        Queue a message for publishing without waiting for the result.

        Args:
            message: The envelope to publish

        Returns:
            Future: The client's publish future, already wired to a
            logging done-callback

        Raises:
            PubSubPublishError: If the client refuses the message
        """
        try:
            future = self._client.publish(
                self._topic_path,
                data=message.to_pubsub_data(),
            )
        except Exception as e:
            raise PubSubPublishError(
                f"Failed to submit message: {e}"
            ) from e

        future.add_done_callback(self._on_publish_done)
        return future

    def _on_publish_done(self, future: Future) -> None:
        """Log the outcome of a publish once the client settles it."""
        if future.cancelled():
            logger.warning("publish_cancelled", topic_path=self._topic_path)
            return

        error = future.exception()
        if error is not None:
            logger.error(
                "publish_failed",
                topic_path=self._topic_path,
                error=str(error),
                error_type=type(error).__name__,
            )
            return

        logger.debug(
            "message_published",
            topic_path=self._topic_path,
            message_id=future.result(),
        )

    def stop(self) -> None:
        """
        Flush queued messages and release the client.

        Safe to call more than once.
        """
        if self._stopped:
            return
        self._stopped = True
        self._client.stop()
        logger.info("publisher_stopped", topic_path=self._topic_path)


def create_publisher(settings: Settings) -> PubSubPublisher:
    """
    Build the publisher described by the settings.

    Raises:
        PublisherInitError: If the client cannot be constructed
    """
    return PubSubPublisher(
        project_id=settings.project_id,
        topic_id=settings.topic_name,
    )
