"""
CSV splitter error handling utilities.

Provides a decorator for consistent error handling across chunk-related
API endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from csv_splitter.core.exceptions import (
    ChunkNotFoundError,
    CsvParseError,
    InvalidInputError,
    StorageIOError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_chunk_errors(func: F) -> F:
    """
    Decorator to handle chunk errors and transform them into HTTPExceptions.

    This centralizes:
    - Mapping domain exceptions to HTTP status codes
    - Logging server-side failures with context
    - Ensuring uniform {"detail": ...} error bodies
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except InvalidInputError as e:
            logger.warning("Invalid chunk request", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=e.message,
            )

        except ChunkNotFoundError as e:
            logger.warning("Chunk not found", extra={"chunk_filename": e.filename})
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="File not found",
            )

        except StorageIOError as e:
            # Message carries server paths; keep it in the log only
            logger.exception("Chunk storage failed", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Chunk storage operation failed",
            )

        except CsvParseError as e:
            logger.exception("Chunk parsing failed", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in chunk operation",
                extra={"error": str(e)}
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred during chunk operation: {str(e)}"
            )

    return wrapper # type: ignore
