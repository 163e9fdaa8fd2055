"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from csv_splitter.configs.base import BaseSettings
from csv_splitter.configs.observability import ObservabilitySettings
from csv_splitter.configs.splitter import SplitterSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    splitter: SplitterSettings = Field(default_factory=SplitterSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from csv_splitter.configs import get_settings
        settings = get_settings()
    """
    return Settings()
