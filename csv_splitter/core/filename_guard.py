"""
Filename guard.

String-level rejection of path traversal patterns in caller-supplied
filenames. Runs before any file-system access; the chunk store repeats a
canonical path containment check at the storage boundary.

Dependencies: None (pure domain layer)
System role: First line of defense for read/delete/download
"""

from csv_splitter.core.exceptions import InvalidInputError

UNSAFE_PATTERNS = ("..", "/", "\\")


def is_safe(name: str) -> bool:
    """Return False when name is empty or contains '..', '/' or '\\'."""
    if not name:
        return False
    return not any(pattern in name for pattern in UNSAFE_PATTERNS)


def ensure_safe(name: str, field: str = "filename") -> str:
    """
    Validate a caller-supplied name.

    Args:
        name: Untrusted filename or namespace token
        field: Field name reported in the error

    Returns:
        str: The unchanged name

    Raises:
        InvalidInputError: If the name contains a traversal pattern
    """
    if not is_safe(name):
        raise InvalidInputError("Invalid filename", field=field, details={"value": name})
    return name
