"""
CSV splitter configuration.

Settings for chunk storage location, chunk size bounds, retention,
and the session cookie that scopes storage per caller.

Dependencies: pydantic_settings
System role: Splitter and chunk storage configuration
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SplitterSettings(BaseSettings):
    """Settings for CSV splitting and chunk storage."""

    model_config = SettingsConfigDict(
        env_prefix="CSV_SPLITTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    chunks_dir: Path = Field(
        default=Path("./csv-chunks"),
        description="Root directory holding one subdirectory per caller namespace",
    )
    default_rows_per_chunk: int = Field(
        default=10000,
        ge=1,
        description="Rows per chunk when the upload does not specify one",
    )
    max_rows_per_chunk: int = Field(
        default=1_000_000,
        ge=1,
        description="Upper bound accepted for rows per chunk",
    )
    retention_hours: int = Field(
        default=24,
        ge=1,
        description="Chunks older than this are removed by the cleanup task",
    )
    session_cookie_name: str = Field(
        default="csv-splitter-session",
        description="Cookie carrying the caller's storage session id",
    )
    session_cookie_max_age: int = Field(
        default=60 * 60 * 24 * 7,
        description="Session cookie lifetime in seconds (default 7 days)",
    )
    cookie_secure: bool = Field(
        default=False,
        description="Mark the session cookie Secure (enable behind HTTPS)",
    )
