#!/usr/bin/env python
"""
Async WebDAV transport client.

This module sends the individual WebDAV requests the WebDAV provider
choreographs.  It turns every HTTP error status into an
HTTPStatusError and every connection failure except certificate and
proxy failures into a NotConnectedError.  Translating those into the
canonical CloudProviderError kinds is left to the provider, which
knows the operation at hand.
"""

import logging
import sys
from collections.abc import Mapping
from contextlib import contextmanager
from types import TracebackType
from typing import AsyncIterator
from typing import BinaryIO
from typing import Iterator
from typing import Optional
from typing import Union

try:
    import niquests
    from niquests import AsyncSession
    from niquests.auth import AuthBase
    from niquests.models import Response
except ImportError as err:
    raise ImportError(
        "niquests library with async support is required for the WebDAV client. "
        "Install with: pip install niquests"
    ) from err

from lxml import etree

from cloudaccess import __version__
from cloudaccess.lib import error
from cloudaccess.lib.auth import extract_auth_types
from cloudaccess.lib.auth import HTTPBearerAuth
from cloudaccess.lib.python_utilities import to_normal_str
from cloudaccess.lib.python_utilities import to_wire
from cloudaccess.lib.url import URL
from cloudaccess.protocol.types import DAVMethod
from cloudaccess.protocol.types import Depth
from cloudaccess.webdav.credential import WebDAVCredential

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = error.log

## Bytes per chunk of a streamed download
CHUNK_SIZE = 64 * 1024

Body = Union[str, bytes, BinaryIO, None]


@contextmanager
def _transport_errors(url: str) -> Iterator[None]:
    """
    Connection failures become NotConnectedError.  Certificate and proxy
    failures pass through unchanged.
    """
    try:
        yield
    except (niquests.exceptions.SSLError, niquests.exceptions.ProxyError):
        raise
    except niquests.exceptions.ConnectionError as e:
        raise error.NotConnectedError(url=url, reason=str(e)) from e


class WebDAVResponse:
    """
    Response from a WebDAV request.

    End users typically won't interact with this class directly.
    """

    reason: str = ""
    status: int = 0
    url: str = ""

    def __init__(self, response: Response, url: str) -> None:
        self.headers = response.headers
        self.status = response.status_code
        self.url = url
        self.content: bytes = response.content or b""
        try:
            self.reason = response.reason or ""
        except AttributeError:
            self.reason = ""

        log.debug("response headers: " + str(self.headers))
        log.debug("response status: " + str(self.status))

        content_type = self.headers.get("Content-Type", "") or ""
        if self.content and log.isEnabledFor(logging.DEBUG):
            if any(content_type.startswith(x) for x in ("text/xml", "application/xml")):
                try:
                    tree = etree.fromstring(self.content)
                    log.debug(etree.tostring(tree, pretty_print=True))
                except etree.XMLSyntaxError:
                    log.debug(
                        "Expected some valid XML from the server, but got this: \n"
                        + to_normal_str(self.content)
                    )
            elif error.debug_dump_communication:
                log.debug(self.content)


class WebDAVClient:
    """
    Async WebDAV client.

    Usage:
        credential = WebDAVCredential("https://cloud.example.com/dav/", "user", "secret")
        async with WebDAVClient(credential) as client:
            response = await client.propfind(client.url, body, depth=Depth.ZERO)
    """

    url: URL = None
    huge_tree: bool = False
    proxy: Optional[str] = None

    def __init__(
        self,
        credential: WebDAVCredential,
        proxy: Optional[str] = None,
        huge_tree: bool = False,
        session: Optional[AsyncSession] = None,
    ) -> None:
        """
        Initialize a WebDAV client.

        Args:
            credential: Base URL, credentials and connection settings.
            proxy: Proxy server (scheme://hostname:port).
            huge_tree: Enable XMLParser huge_tree for large listings (security consideration).
            session: An existing niquests AsyncSession to use.  The client
                closes it on close().
        """
        self.credential = credential
        self.url = credential.url
        self.huge_tree = huge_tree
        self.session = session if session is not None else AsyncSession()

        self.proxy = proxy
        if self.proxy is not None and "://" not in self.proxy:
            self.proxy = "http://" + self.proxy

        self.timeout = credential.timeout
        self.ssl_verify_cert = credential.ssl_verify_cert
        self.ssl_cert = credential.ssl_cert
        self.auth = self.build_auth_object()

        self.headers: dict[str, str] = {
            "User-Agent": f"cloudaccess/{__version__}",
        }
        self.headers.update(credential.headers)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the async session."""
        if hasattr(self, "session"):
            await self.session.close()

    @staticmethod
    def _build_method_headers(
        method: DAVMethod,
        depth: Optional[Depth] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> dict[str, str]:
        """
        Build headers for WebDAV methods.

        Args:
            method: HTTP method.
            depth: Depth header value (for PROPFIND).
            extra_headers: Additional headers to merge.

        Returns:
            Dictionary of headers.
        """
        headers: dict[str, str] = {}

        if depth is not None:
            headers["Depth"] = depth.value

        if method == DAVMethod.PROPFIND:
            headers["Content-Type"] = 'application/xml; charset="utf-8"'

        if extra_headers:
            headers.update(extra_headers)

        return headers

    def _make_absolute_url(self, url: Union[URL, str]) -> URL:
        url = URL.objectify(url)
        if not url.scheme:
            return self.url.join(url)
        return url

    async def request(
        self,
        url: Union[URL, str],
        method: DAVMethod = DAVMethod.GET,
        body: Body = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> WebDAVResponse:
        """
        Send an async HTTP request.

        Args:
            url: Request URL, absolute or relative to the base URL.
            method: HTTP method.
            body: Request body.  An open binary file is streamed.
            headers: Additional headers.

        Returns:
            WebDAVResponse object.

        Raises:
            NotConnectedError: The server could not be reached.
            AuthorizationError: The server answered 401 or 403.
            HTTPStatusError: The server answered with any other status >= 400.
        """
        url_obj = self._make_absolute_url(url)
        r = await self._send(url_obj, method, body, headers)
        return WebDAVResponse(r, str(url_obj))

    async def _send(
        self,
        url_obj: URL,
        method: DAVMethod,
        body: Body = None,
        headers: Optional[Mapping[str, str]] = None,
        stream: bool = False,
    ) -> Response:
        combined_headers = self.headers.copy()
        combined_headers.update(headers or {})
        if not body and "Content-Type" in combined_headers:
            del combined_headers["Content-Type"]

        proxies = None
        if self.proxy is not None:
            proxies = {url_obj.scheme: self.proxy}
            log.debug(f"using proxy - {proxies}")

        if isinstance(body, (str, bytes)):
            data = to_wire(body) if body else None
            if isinstance(body, bytes) and not error.debug_dump_communication:
                logged_body = f"<{len(body)} bytes>"
            else:
                logged_body = to_normal_str(body)
        else:
            data = body
            logged_body = "<stream>" if body is not None else None
        log.debug(
            f"sending request - method={method.value}, url={str(url_obj)}, headers={combined_headers}\nbody:\n{logged_body}"
        )

        with _transport_errors(str(url_obj)):
            r = await self.session.request(
                method.value,
                str(url_obj),
                data=data,
                headers=combined_headers,
                proxies=proxies,
                auth=self.auth,
                timeout=self.timeout,
                verify=self.ssl_verify_cert,
                cert=self.ssl_cert,
                stream=stream,
            )
        log.debug(f"server responded with {r.status_code} {r.reason}")

        if r.status_code >= 400:
            if stream:
                await r.close()
            self._raise_for_status(r, str(url_obj))
        return r

    @staticmethod
    def _raise_for_status(r: Response, url: str) -> None:
        reason = r.reason or "None given"
        if r.status_code in (401, 403):
            if r.status_code == 401 and r.headers.get("WWW-Authenticate"):
                auth_types = extract_auth_types(r.headers["WWW-Authenticate"])
                log.info(
                    "Server refused the credentials, it accepts: {}".format(
                        ", ".join(sorted(auth_types))
                    )
                )
            raise error.AuthorizationError(url=url, reason=reason, status=r.status_code)
        raise error.HTTPStatusError(url=url, reason=reason, status=r.status_code)

    # ==================== HTTP Method Wrappers ====================

    async def propfind(
        self,
        url: Union[URL, str],
        body: bytes = b"",
        depth: Depth = Depth.ZERO,
    ) -> WebDAVResponse:
        """
        Send a PROPFIND request.

        Args:
            url: Target URL.
            body: XML properties request.
            depth: Depth.ZERO for the resource itself, Depth.ONE to include children.
        """
        headers = self._build_method_headers(DAVMethod.PROPFIND, depth)
        return await self.request(url, DAVMethod.PROPFIND, body, headers)

    async def get(self, url: Union[URL, str]) -> WebDAVResponse:
        return await self.request(url, DAVMethod.GET)

    async def get_stream(
        self, url: Union[URL, str], chunk_size: int = CHUNK_SIZE
    ) -> AsyncIterator[bytes]:
        """
        GET a resource and yield its body in chunks, without holding the
        whole body in memory.  Errors are the same as for request(); a
        connection lost halfway through raises NotConnectedError.

        Close the iterator (contextlib.aclosing) when not consuming it to
        the end, so the connection is released.
        """
        url_obj = self._make_absolute_url(url)
        r = await self._send(url_obj, DAVMethod.GET, stream=True)
        try:
            with _transport_errors(str(url_obj)):
                async for chunk in await r.iter_content(chunk_size):
                    yield chunk
        finally:
            await r.close()

    async def put(
        self,
        url: Union[URL, str],
        body: Union[bytes, BinaryIO],
        headers: Optional[Mapping[str, str]] = None,
    ) -> WebDAVResponse:
        final_headers = {"Content-Type": "application/octet-stream"}
        final_headers.update(headers or {})
        return await self.request(url, DAVMethod.PUT, body, final_headers)

    async def mkcol(self, url: Union[URL, str]) -> WebDAVResponse:
        """
        Send a MKCOL request, creating a collection.
        """
        return await self.request(url, DAVMethod.MKCOL)

    async def delete(self, url: Union[URL, str]) -> WebDAVResponse:
        return await self.request(url, DAVMethod.DELETE)

    async def move(
        self,
        source: Union[URL, str],
        destination: Union[URL, str],
        overwrite: bool = False,
    ) -> WebDAVResponse:
        """
        Send a MOVE request.

        Args:
            source: URL of the resource to move.
            destination: Target URL, sent as absolute URL in the Destination header.
            overwrite: Value of the Overwrite header.  With False the server
                answers 412 if the destination exists.
        """
        headers = {
            "Destination": str(self._make_absolute_url(destination)),
            "Overwrite": "T" if overwrite else "F",
        }
        return await self.request(source, DAVMethod.MOVE, None, headers)

    async def options(self, url: Union[URL, str, None] = None) -> WebDAVResponse:
        return await self.request(url or self.url, DAVMethod.OPTIONS)

    async def check_connection(self) -> WebDAVResponse:
        """
        Probe the base URL with an OPTIONS request.

        Returns:
            The OPTIONS response.

        Raises:
            The same errors as request().
        """
        response = await self.options()
        log.info(f"Connected to WebDAV server: {self.url}")

        dav_header = response.headers.get("DAV", "")
        if not dav_header:
            log.warning("Server did not return DAV header - may not be a WebDAV server")
        else:
            log.debug(f"Server DAV capabilities: {dav_header}")
        return response

    # ==================== Authentication Helpers ====================

    def build_auth_object(self) -> Optional[AuthBase]:
        """
        Build the authentication object for the configured credentials.

        Returns:
            An auth object for niquests, or None for anonymous access.
        """
        auth_type = self.credential.auth_type
        username = self.credential.username
        password = self.credential.password

        if auth_type is None:
            return None
        if auth_type == "bearer":
            return HTTPBearerAuth(password)
        elif auth_type == "digest":
            from niquests.auth import AsyncHTTPDigestAuth

            return AsyncHTTPDigestAuth(username, password)
        elif auth_type == "basic":
            from niquests.auth import HTTPBasicAuth

            return HTTPBasicAuth(username or "", password or "")
        raise error.AuthorizationError(
            url=str(self.url), reason=f"Unsupported auth type: {auth_type}"
        )
