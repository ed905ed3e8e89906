"""
Pure functions for parsing WebDAV XML responses.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.
"""

import logging
from datetime import datetime
from typing import List
from typing import Optional
from typing import Tuple
from urllib.parse import unquote

from dateutil import parser as dateparser
from lxml import etree
from lxml.etree import _Element

from cloudaccess.elements import dav
from cloudaccess.lib import error
from cloudaccess.lib.url import URL

from .types import PropfindResponseElement

log = logging.getLogger(__name__)


def parse_propfind_response(
    body: bytes,
    request_url: str,
    huge_tree: bool = False,
) -> List[PropfindResponseElement]:
    """
    Parse a 207 Multi-Status response to a PROPFIND request.

    Args:
        body: Raw XML response bytes
        request_url: URL the PROPFIND was sent to, used to resolve hrefs
            and to compute the depth of each element
        huge_tree: Allow parsing very large XML documents

    Returns:
        One PropfindResponseElement per resource, in document order

    Raises:
        InvalidResponseError: If the body is not valid XML or does not
            describe the requested resource itself
    """
    if not body:
        raise error.InvalidResponseError(request_url, "empty PROPFIND response")
    try:
        parser = etree.XMLParser(huge_tree=huge_tree)
        tree = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.InvalidResponseError(request_url, f"malformed XML: {e}") from e

    base = URL.objectify(request_url)
    request_segments = _path_segments(base.path)
    elements: List[PropfindResponseElement] = []

    for response in _strip_to_multistatus(tree):
        if response.tag != dav.Response.tag:
            error.weirdness("unexpected element found in multistatus", response)
            continue

        href, propstats, status = _parse_response_element(response)
        if not href:
            error.weirdness("response without href", response)
            continue
        if status is not None and not _is_success(status):
            log.debug(f"skipping {href} with status {status}")
            continue

        try:
            url = base.join(href)
        except ValueError:
            ## i.e. a reverse proxy reporting its internal host name
            error.weirdness(f"href {href} does not belong to {base}")
            url = base.join(URL(href).path)

        elements.append(
            _build_element(
                str(url),
                _depth(request_segments, _path_segments(url.path)),
                propstats,
            )
        )

    roots = [e for e in elements if e.depth == 0]
    if not roots:
        raise error.InvalidResponseError(
            request_url, "PROPFIND response does not contain the requested resource"
        )
    error.assert_(len(roots) == 1)
    return elements


# Helper functions


def _strip_to_multistatus(tree: _Element) -> _Element | List[_Element]:
    """
    Strip outer elements to get to the multistatus content.

    The general format is:
        <xml><multistatus>
            <response>...</response>
            <response>...</response>
        </multistatus></xml>

    But sometimes multistatus and/or xml element is missing.
    Returns the element(s) containing responses.
    """
    if tree.tag == "xml" and len(tree) > 0 and tree[0].tag == dav.MultiStatus.tag:
        return tree[0]
    if tree.tag == dav.MultiStatus.tag:
        return tree
    return [tree]


def _parse_response_element(
    response: _Element,
) -> Tuple[Optional[str], List[_Element], Optional[str]]:
    """
    Parse a single DAV:response element.

    Returns:
        Tuple of (href, propstat elements list, status string)
    """
    status: Optional[str] = None
    href: Optional[str] = None
    propstats: List[_Element] = []

    for elem in response:
        if elem.tag == dav.Status.tag:
            status = elem.text
        elif elem.tag == dav.Href.tag:
            href = (elem.text or "").strip()
        elif elem.tag == dav.PropStat.tag:
            propstats.append(elem)

    return (href, propstats, status)


def _build_element(
    url: str, depth: int, propstats: List[_Element]
) -> PropfindResponseElement:
    collection: Optional[bool] = None
    last_modified: Optional[datetime] = None
    content_length: Optional[int] = None

    for prop in _found_properties(propstats):
        if prop.tag == dav.ResourceType.tag:
            collection = any(child.tag == dav.Collection.tag for child in prop)
        elif prop.tag == dav.GetLastModified.tag:
            last_modified = _parse_http_date(prop.text)
        elif prop.tag == dav.GetContentLength.tag:
            content_length = _parse_content_length(prop.text)

    return PropfindResponseElement(
        url=url,
        depth=depth,
        collection=collection,
        last_modified=last_modified,
        content_length=content_length,
    )


def _found_properties(propstats: List[_Element]) -> List[_Element]:
    """Properties from all propstats with a successful status.

    Servers report unsupported properties in a separate propstat with
    status 404; those are left out.
    """
    found: List[_Element] = []
    for propstat in propstats:
        status_elem = propstat.find(dav.Status.tag)
        if status_elem is not None and status_elem.text:
            if not _is_success(status_elem.text):
                continue
        prop = propstat.find(dav.Prop.tag)
        if prop is None:
            continue
        found.extend(prop)
    return found


def _path_segments(path: str) -> List[str]:
    return [unquote(segment) for segment in path.split("/") if segment]


def _depth(request_segments: List[str], segments: List[str]) -> int:
    if segments[: len(request_segments)] != request_segments:
        error.weirdness(
            "href %s is not below the requested path %s"
            % ("/".join(segments), "/".join(request_segments))
        )
        return max(len(segments) - len(request_segments), 1)
    return len(segments) - len(request_segments)


def _parse_http_date(text: Optional[str]) -> Optional[datetime]:
    if not text or not text.strip():
        return None
    try:
        return dateparser.parse(text.strip())
    except (ValueError, OverflowError):
        error.weirdness(f"unparseable getlastmodified: {text}")
        return None


def _parse_content_length(text: Optional[str]) -> Optional[int]:
    if not text or not text.strip():
        return None
    try:
        return int(text.strip())
    except ValueError:
        error.weirdness(f"unparseable getcontentlength: {text}")
        return None


def _status_to_code(status: Optional[str]) -> int:
    """
    Extract status code from status string like "HTTP/1.1 200 OK".

    Args:
        status: Status string

    Returns:
        Integer status code (defaults to 200 if parsing fails)
    """
    if not status:
        return 200

    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[1])
        except ValueError:
            pass

    return 200


def _is_success(status: str) -> bool:
    return 200 <= _status_to_code(status) < 300
