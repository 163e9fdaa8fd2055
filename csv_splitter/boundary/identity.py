"""
Caller identity resolution for chunk storage.

Maps an inbound request to a stable namespace token using a session cookie.
The token is the only identity the chunk store ever sees.

Dependencies: fastapi, csv_splitter.configs
System role: Access boundary between HTTP sessions and storage namespaces
"""

import re
import secrets
from dataclasses import dataclass

from fastapi import Request, Response

from csv_splitter.configs.splitter import SplitterSettings

NAMESPACE_PREFIX = "session_"
SESSION_ID_RE = re.compile(r"^[0-9a-f]{32}$")


@dataclass(frozen=True)
class StorageIdentity:
    """Namespace token for one caller."""

    namespace: str
    session_id: str
    is_new: bool = False


def new_session_id() -> str:
    """Generate a random 128-bit hex session id."""
    return secrets.token_hex(16)


def resolve_storage_identity(request: Request, settings: SplitterSettings) -> StorageIdentity:
    """
    Resolve the caller's storage namespace from the session cookie.

    A missing or malformed cookie produces a fresh session that the
    response must persist with attach_session_cookie.

    Args:
        request: Incoming request
        settings: Splitter settings holding the cookie name

    Returns:
        StorageIdentity: Namespace token and session id
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id and SESSION_ID_RE.match(session_id):
        return StorageIdentity(namespace=f"{NAMESPACE_PREFIX}{session_id}", session_id=session_id)

    session_id = new_session_id()
    return StorageIdentity(
        namespace=f"{NAMESPACE_PREFIX}{session_id}",
        session_id=session_id,
        is_new=True,
    )


def attach_session_cookie(
    response: Response,
    identity: StorageIdentity,
    settings: SplitterSettings,
) -> None:
    """Set the session cookie on the response when the identity is new."""
    if not identity.is_new:
        return
    response.set_cookie(
        key=settings.session_cookie_name,
        value=identity.session_id,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
