"""
CSV splitter validation utilities.

Upload checks not covered by the form parsing itself.

Dependencies: fastapi, csv_splitter.configs
System role: Split request validation
"""

import os

from fastapi import UploadFile

from csv_splitter.configs.splitter import SplitterSettings
from csv_splitter.core.exceptions import InvalidInputError
from csv_splitter.core.filename_guard import ensure_safe

ALLOWED_EXTENSION = ".csv"


def validate_upload(file: UploadFile | None) -> UploadFile:
    """
    Validate the uploaded source file.

    Args:
        file: Multipart upload, possibly missing

    Returns:
        UploadFile: The validated upload

    Raises:
        InvalidInputError: Missing file, wrong extension, or empty file
    """
    if file is None or not file.filename:
        raise InvalidInputError("No file provided", field="file")

    if not file.filename.lower().endswith(ALLOWED_EXTENSION):
        raise InvalidInputError(
            "File must be a CSV file (.csv extension required)",
            field="file",
        )

    if _upload_size(file) == 0:
        raise InvalidInputError("File is empty", field="file")

    return file


def parse_rows_per_chunk(raw: str | None, settings: SplitterSettings) -> int:
    """
    Parse the rowsPerChunk form value.

    A missing or blank value falls back to the configured default.

    Raises:
        InvalidInputError: Non-integer or out of [1, max_rows_per_chunk]
    """
    if raw is None or not raw.strip():
        return settings.default_rows_per_chunk

    try:
        rows_per_chunk = int(raw.strip())
    except ValueError as e:
        raise InvalidInputError(
            "Rows per chunk must be an integer", field="rowsPerChunk"
        ) from e

    if rows_per_chunk < 1 or rows_per_chunk > settings.max_rows_per_chunk:
        raise InvalidInputError(
            f"Rows per chunk must be between 1 and {settings.max_rows_per_chunk:,}",
            field="rowsPerChunk",
        )
    return rows_per_chunk


def check_filename(filename: str) -> str:
    """Run the filename guard on a path value the router already percent-decoded."""
    return ensure_safe(filename)


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    position = file.file.tell()
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(position)
    return size
