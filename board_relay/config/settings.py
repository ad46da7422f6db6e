"""
Board Relay - Application Settings

Loads configuration from environment variables using Pydantic Settings.
Every variable is prefixed with ``RELAY_`` (``RELAY_PORT``, ``RELAY_LOG_LEVEL``...).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Transport
    host: str = "0.0.0.0"
    port: int = Field(default=4741, ge=1, le=65535)
    socketio_path: str = "socket.io"
    cors_allowed_origins: str = "*"

    # Relay
    default_session: str = "global"
    strict_vocabulary: bool = True
    outbound_queue_size: int = Field(default=256, ge=1)

    # Application
    debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> str | list[str]:
        """CORS origins in the shape python-socketio expects.

        ``"*"`` allows any origin; otherwise a comma separated list
        is split into individual origins.
        """
        value = self.cors_allowed_origins.strip()
        if value == "*":
            return "*"
        return [origin.strip() for origin in value.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()
