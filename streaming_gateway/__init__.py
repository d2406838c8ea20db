# =============================================================================
# Streaming Gateway - Package Initialization
# =============================================================================
"""
Streaming Gateway

A small authenticated ingestion endpoint that wraps each incoming event in a
timestamped envelope and publishes it to a Google Cloud Pub/Sub topic.
"""

__version__ = "1.0.0"
