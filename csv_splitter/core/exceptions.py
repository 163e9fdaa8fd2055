"""
Exception hierarchy for the CSV splitter service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Client-side conditions (InvalidInputError, ChunkNotFoundError) are expected
and recoverable by the caller. Server-side conditions (StorageIOError,
CsvParseError) are logged and surfaced as server errors.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CsvSplitterException(Exception):
    """Base exception for all CSV splitter errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidInputError(CsvSplitterException):
    """Raised for unsafe filenames, too-short sources, or bad chunk sizes."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid input error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ChunkNotFoundError(CsvSplitterException):
    """Raised when a chunk file does not exist in the caller's namespace."""

    def __init__(
        self,
        filename: str,
        namespace: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize chunk not found error.

        Args:
            filename: Requested chunk filename
            namespace: Caller namespace that was searched
            details: Additional context
        """
        details = details or {}
        details["filename"] = filename
        if namespace:
            details["namespace"] = namespace
        self.filename = filename
        super().__init__(f"Chunk not found: {filename}", details)


class StorageIOError(CsvSplitterException):
    """Raised when an unexpected file-system failure occurs."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Operation that failed (write, list, read, delete, download)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class CsvParseError(CsvSplitterException):
    """Raised when the source cannot be decoded as delimited text."""

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize parse error.

        Args:
            message: Error message
            line_number: 1-based source line where parsing stopped
            details: Additional context
        """
        details = details or {}
        if line_number is not None:
            details["line_number"] = line_number
        self.line_number = line_number
        super().__init__(message, details)
