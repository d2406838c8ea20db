"""
Tests for the Pub/Sub publisher wrapper.

The Google client is always patched; no network access is needed.
"""

import json
from concurrent.futures import Future
from unittest.mock import MagicMock, patch

import pytest

from streaming_gateway.config import Settings
from streaming_gateway.models import EnvelopeMessage
from streaming_gateway.services import (
    PubSubPublisher,
    PubSubPublishError,
    PublisherInitError,
    create_publisher,
)


TOPIC_PATH = "projects/test-project/topics/test-topic"


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.topic_path.return_value = TOPIC_PATH
    return client


@pytest.fixture
def envelope():
    return EnvelopeMessage(
        ingested_at="2024-01-15T10:00:00Z",
        payload={"user": "a1", "action": "click"},
    )


class TestInit:

    @patch("streaming_gateway.services.pubsub.pubsub_v1.PublisherClient")
    def test_creates_client_and_topic_path(self, mock_client_cls, mock_client):
        mock_client_cls.return_value = mock_client

        publisher = PubSubPublisher("test-project", "test-topic")

        mock_client_cls.assert_called_once_with()
        mock_client.topic_path.assert_called_once_with("test-project", "test-topic")
        assert publisher.topic_path == TOPIC_PATH

    @patch("streaming_gateway.services.pubsub.pubsub_v1.PublisherClient")
    def test_client_failure_raises_init_error(self, mock_client_cls):
        mock_client_cls.side_effect = Exception("Could not find default credentials")

        with pytest.raises(PublisherInitError, match="default credentials"):
            PubSubPublisher("test-project", "test-topic")

    @patch("streaming_gateway.services.pubsub.pubsub_v1.PublisherClient")
    def test_create_publisher_uses_settings(self, mock_client_cls, mock_client):
        mock_client_cls.return_value = mock_client

        publisher = create_publisher(
            Settings(project_id="test-project", topic_name="test-topic")
        )

        assert publisher.project_id == "test-project"
        assert publisher.topic_id == "test-topic"


class TestSubmit:

    def test_publishes_serialized_envelope(self, mock_client, envelope):
        publisher = PubSubPublisher("test-project", "test-topic", client=mock_client)

        future = publisher.submit(envelope)

        args, kwargs = mock_client.publish.call_args
        assert args == (TOPIC_PATH,)
        assert json.loads(kwargs["data"]) == {
            "ingested_at": "2024-01-15T10:00:00Z",
            "payload": {"user": "a1", "action": "click"},
        }
        assert future is mock_client.publish.return_value
        future.add_done_callback.assert_called_once()

    def test_does_not_wait_for_result(self, mock_client, envelope):
        publisher = PubSubPublisher("test-project", "test-topic", client=mock_client)

        future = publisher.submit(envelope)

        future.result.assert_not_called()

    def test_client_error_is_wrapped(self, mock_client, envelope):
        mock_client.publish.side_effect = RuntimeError("Cannot publish on a stopped publisher")
        publisher = PubSubPublisher("test-project", "test-topic", client=mock_client)

        with pytest.raises(PubSubPublishError, match="stopped publisher"):
            publisher.submit(envelope)


class TestPublishOutcome:

    @pytest.fixture
    def publisher(self, mock_client):
        return PubSubPublisher("test-project", "test-topic", client=mock_client)

    @patch("streaming_gateway.services.pubsub.logger")
    def test_failure_is_logged(self, mock_logger, publisher):
        future = Future()
        future.set_exception(RuntimeError("deadline exceeded"))

        publisher._on_publish_done(future)

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "publish_failed"
        assert mock_logger.error.call_args.kwargs["error"] == "deadline exceeded"

    @patch("streaming_gateway.services.pubsub.logger")
    def test_success_is_logged_at_debug(self, mock_logger, publisher):
        future = Future()
        future.set_result("msg-123")

        publisher._on_publish_done(future)

        mock_logger.error.assert_not_called()
        assert mock_logger.debug.call_args.kwargs["message_id"] == "msg-123"

    @patch("streaming_gateway.services.pubsub.logger")
    def test_cancelled_is_logged(self, mock_logger, publisher):
        future = Future()
        future.cancel()

        publisher._on_publish_done(future)

        assert mock_logger.warning.call_args.args[0] == "publish_cancelled"


class TestStop:

    def test_stop_flushes_once(self, mock_client):
        publisher = PubSubPublisher("test-project", "test-topic", client=mock_client)

        publisher.stop()
        publisher.stop()

        mock_client.stop.assert_called_once_with()
