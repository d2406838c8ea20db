# =============================================================================
# Streaming Gateway - Models Package
# =============================================================================
"""Pydantic models for request decoding and message serialization."""

from .schemas import (
    EnvelopeMessage,
    HealthResponse,
    IngestionRequest,
    format_timestamp,
    utc_now,
)

__all__ = [
    "EnvelopeMessage",
    "HealthResponse",
    "IngestionRequest",
    "format_timestamp",
    "utc_now",
]
