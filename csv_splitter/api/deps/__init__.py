"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_chunk_store,
    get_settings_dependency,
    get_split_service,
    get_storage_identity,
)

__all__ = [
    "get_chunk_store",
    "get_settings_dependency",
    "get_split_service",
    "get_storage_identity",
]
