"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: csv_splitter.configs, csv_splitter.application, csv_splitter.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Request

from csv_splitter.application.services.split_service import SplitService
from csv_splitter.boundary.identity import StorageIdentity, resolve_storage_identity
from csv_splitter.boundary.storage.chunk_store import ChunkStore
from csv_splitter.configs import Settings, get_settings


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_chunk_store(settings: Settings = Depends(get_settings_dependency)) -> ChunkStore:
    """
    Get chunk store rooted at the configured chunks directory.

    Args:
        settings: Application settings (injected via Depends)

    Returns:
        ChunkStore: File-system chunk store
    """
    return ChunkStore(settings.splitter.chunks_dir)


def get_split_service(store: ChunkStore = Depends(get_chunk_store)) -> SplitService:
    """
    Get split service instance.

    Args:
        store: Chunk store (injected via Depends)

    Returns:
        SplitService: Split service bound to the store
    """
    return SplitService(store=store)


def get_storage_identity(
    request: Request,
    settings: Settings = Depends(get_settings_dependency),
) -> StorageIdentity:
    """
    Resolve the caller's storage namespace from the session cookie.

    Args:
        request: Incoming request
        settings: Application settings (injected via Depends)

    Returns:
        StorageIdentity: Namespace token for chunk store calls
    """
    return resolve_storage_identity(request, settings.splitter)
