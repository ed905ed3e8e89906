"""
Sans-I/O WebDAV protocol helpers.

This module builds request bodies and parses response bodies as pure
data transformations; the WebDAV client does the actual I/O.

- types: Core data structures (DAVMethod, Depth, PropfindResponseElement)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies

Example usage:

    from cloudaccess.protocol import build_propfind_body, parse_propfind_response

    body = build_propfind_body()
    response = await client.propfind(url, body, depth=Depth.ONE)
    elements = parse_propfind_response(response.content, str(url))
"""

from .types import (
    DAVMethod,
    Depth,
    PropfindResponseElement,
)
from .xml_builders import (
    DEFAULT_PROPERTY_NAMES,
    build_propfind_body,
)
from .xml_parsers import parse_propfind_response

__all__ = [
    "DAVMethod",
    "Depth",
    "PropfindResponseElement",
    "DEFAULT_PROPERTY_NAMES",
    "build_propfind_body",
    "parse_propfind_response",
]
