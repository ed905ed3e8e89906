"""
Authentication utilities for the WebDAV client.

Credentials are supplied by the caller up front; the client never
negotiates the authentication scheme with the server on its own.
"""

from __future__ import annotations

from requests.auth import AuthBase

SUPPORTED_AUTH_TYPES = ("basic", "digest", "bearer")


def extract_auth_types(header: str) -> set[str]:
    """
    Extract authentication types from WWW-Authenticate header.

    Parses the WWW-Authenticate header value and extracts the
    authentication scheme names (e.g., "basic", "digest", "bearer").

    Args:
        header: WWW-Authenticate header value from server response.

    Returns:
        Set of lowercase auth type strings.

    Example:
        >>> extract_auth_types('Basic realm="test", Digest realm="test"')
        {'basic', 'digest'}

    Reference:
        https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}


def select_auth_type(
    has_username: bool,
    has_password: bool,
    auth_types: set[str] | list[str] | None = None,
) -> str | None:
    """
    Select an authentication type for the configured credentials.

    Args:
        has_username: Whether a username is configured.
        has_password: Whether a password is configured.
        auth_types: Types acceptable to the server, if known.

    Returns:
        Selected auth type string, or None if no suitable type found.

    Selection logic:
        - If username is set: Basic, or Digest if the server only offers that
        - If only password is set: Bearer token auth
        - Otherwise: None (anonymous access)
    """
    available = set(auth_types) if auth_types else set(SUPPORTED_AUTH_TYPES)

    if has_username:
        if "basic" in available:
            return "basic"
        if "digest" in available:
            return "digest"
    elif has_password:
        if "bearer" in available:
            return "bearer"

    return None


class HTTPBearerAuth(AuthBase):
    """Sends the configured token as ``Authorization: Bearer <token>``."""

    def __init__(self, token: str) -> None:
        self.token = token

    def __eq__(self, other: object) -> bool:
        return self.token == getattr(other, "token", None)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __repr__(self) -> str:
        return "HTTPBearerAuth(token=***)"

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r
