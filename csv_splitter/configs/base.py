"""
Shared settings base.

Every settings class of the service reads the same .env file
case-insensitively and ignores unknown keys. Carries the process-wide
switches read by the app factory.

Dependencies: pydantic_settings
System role: Root of the configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Process-wide settings: debug mode and log level."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="FastAPI debug tracebacks and uvicorn auto-reload",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level passed to configure_logging",
    )
