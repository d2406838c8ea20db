# =============================================================================
# Streaming Gateway - Configuration
# =============================================================================
"""
Application configuration using Pydantic Settings.

Values are read once from the environment (or a local .env file) and are
never mutated afterwards. Nothing here is validated beyond its type: a wrong
project or topic surfaces later as a publisher failure.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        project_id: Google Cloud project that owns the topic
        api_key: Shared secret expected as the bearer token
        topic_name: Pub/Sub topic events are published to
        environment: Current environment (development/staging/production)
        log_level: Logging verbosity level
        service_name: Name of this service for logging
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
    """

    # Google Cloud Configuration
    project_id: str = ""
    topic_name: str = ""

    # Authentication
    api_key: str = ""

    # Application Configuration
    environment: str = "development"
    log_level: str = "INFO"
    service_name: str = "streaming-gateway"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8080

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
