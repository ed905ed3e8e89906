"""
Core protocol types for the WebDAV adapter.

These dataclasses describe what goes over the wire and what comes back,
independent of any I/O implementation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DAVMethod(Enum):
    """WebDAV HTTP methods used by the adapter."""

    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"
    MKCOL = "MKCOL"
    MOVE = "MOVE"
    OPTIONS = "OPTIONS"


class Depth(Enum):
    """Values of the Depth header used with PROPFIND."""

    ZERO = "0"
    ONE = "1"


@dataclass(frozen=True)
class PropfindResponseElement:
    """
    One resource from a PROPFIND multi-status response.

    Attributes:
        url: Absolute URL of the resource, as reported by the server
        depth: Depth relative to the request URL (0 for the resource itself)
        collection: True for a collection, False for a plain resource,
            None if the server did not report a resourcetype
        last_modified: Value of getlastmodified, if reported and parseable
        content_length: Value of getcontentlength, if reported and parseable
    """

    url: str
    depth: int
    collection: Optional[bool] = None
    last_modified: Optional[datetime] = None
    content_length: Optional[int] = None
