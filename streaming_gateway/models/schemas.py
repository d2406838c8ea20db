# =============================================================================
# Streaming Gateway - Pydantic Schemas
# =============================================================================
"""
Request, envelope and response models for the gateway.

Event payloads are kept as opaque JSON trees: the gateway never maps them
into a fixed schema, it only checks that each event is a JSON object.
"""

import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator


# RFC 3339, second precision, always UTC
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(moment: datetime) -> str:
    """
    Render a datetime as an RFC 3339 UTC timestamp.

    Naive datetimes are taken to already be in UTC.

    Args:
        moment: The instant to format

    Returns:
        str: Timestamp such as ``2024-01-15T10:00:00Z``
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_finite_tree(value: JsonValue) -> bool:
    """Whether every number in a JSON tree is representable in strict JSON."""
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(_is_finite_tree(item) for item in value.values())
    if isinstance(value, list):
        return all(_is_finite_tree(item) for item in value)
    return True


class IngestionRequest(BaseModel):
    """
    Request body accepted by the gateway.

    Example:
        {
            "data": [
                {"user": "a1", "action": "click"},
                {"user": "b2", "action": "view"}
            ]
        }
    """

    data: list[dict[str, JsonValue]] = Field(
        ...,
        description="Events to publish, one message per element",
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("data")
    @classmethod
    def reject_non_finite_numbers(
        cls, v: list[dict[str, JsonValue]]
    ) -> list[dict[str, JsonValue]]:
        """Reject NaN, Infinity and numbers too large for a double."""
        for event in v:
            if not _is_finite_tree(event):
                raise ValueError("events must not contain NaN or infinite numbers")
        return v


class EnvelopeMessage(BaseModel):
    """
    Message published to Pub/Sub for a single event.

    Attributes:
        ingested_at: When the gateway received the event (RFC 3339, UTC)
        payload: The original event, unmodified
    """

    ingested_at: str = Field(..., description="Ingestion timestamp (UTC)")
    payload: dict[str, JsonValue] = Field(..., description="Original event")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def wrap(cls, event: dict[str, JsonValue], moment: datetime) -> "EnvelopeMessage":
        """Wrap an event with the ingestion time."""
        return cls(ingested_at=format_timestamp(moment), payload=event)

    def to_pubsub_data(self) -> bytes:
        """
        Serialize the envelope for Pub/Sub publishing.

        Returns:
            bytes: UTF-8 encoded JSON representation
        """
        return self.model_dump_json().encode("utf-8")


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str = Field(default="healthy", description="Health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="Current timestamp",
    )
