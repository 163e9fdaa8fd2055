"""Chunk storage."""

from .chunk_store import ChunkBatch, ChunkDownload, ChunkStore

__all__ = ["ChunkBatch", "ChunkDownload", "ChunkStore"]
