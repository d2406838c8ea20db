# =============================================================================
# Streaming Gateway - Shared Test Fixtures
# =============================================================================
"""Fixtures shared by the gateway test modules."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from streaming_gateway.config import Settings
from streaming_gateway.main import create_app
from streaming_gateway.services import PubSubPublisher

from tests.helpers import API_KEY


@pytest.fixture
def settings():
    """Settings with a known shared secret."""
    return Settings(
        project_id="test-project",
        api_key=API_KEY,
        topic_name="test-topic",
    )


@pytest.fixture
def publisher():
    """Publisher double that records submitted envelopes."""
    mock_publisher = MagicMock(spec=PubSubPublisher)
    mock_publisher.submit.return_value = MagicMock()
    return mock_publisher


@pytest.fixture
def client(settings, publisher):
    """Test client wired to the publisher double."""
    with TestClient(create_app(settings, publisher)) as test_client:
        yield test_client
