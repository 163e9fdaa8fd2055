"""
Core business logic module.

Contains the exception hierarchy, filename guard, chunk codec and
splitter engine. No file-system or HTTP concerns live here.
"""

from csv_splitter.core.exceptions import (
    ChunkNotFoundError,
    CsvParseError,
    CsvSplitterException,
    InvalidInputError,
    StorageIOError,
)

__all__ = [
    "ChunkNotFoundError",
    "CsvParseError",
    "CsvSplitterException",
    "InvalidInputError",
    "StorageIOError",
]
