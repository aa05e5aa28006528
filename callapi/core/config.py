"""Runtime settings for callapi.

Values come from environment variables prefixed with ``CALLAPI_`` (or a local
``.env`` file). Only the default transport and logging setup read them; the
orchestrator itself is configured through its constructor.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="CALLAPI_",
        env_file=".env",
        extra="ignore",
    )

    APP_NAME: str = "callapi"
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_JSON: bool = False

    # Default HTTP transport
    HTTP_TIMEOUT: float = Field(30.0, gt=0, description="Seconds per request")
    HTTP_FOLLOW_REDIRECTS: bool = True
    HTTP_USER_AGENT: str = "callapi/1.0"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
