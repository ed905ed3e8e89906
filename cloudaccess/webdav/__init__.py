"""
WebDAV backend: transport client, credential and provider.

    async with await get_webdav_provider(
        url="https://cloud.example.com/remote.php/webdav/",
        username="alice",
        password="secret",
    ) as provider:
        listing = await provider.fetch_item_list("/")
"""
import logging
from typing import Any
from typing import Optional

from cloudaccess.webdav.credential import WebDAVCredential
from cloudaccess.webdav.client import WebDAVClient
from cloudaccess.webdav.client import WebDAVResponse
from cloudaccess.webdav.provider import WebDAVProvider
from cloudaccess import config

log = logging.getLogger("cloudaccess")


async def get_webdav_provider(
    url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    probe: bool = True,
    proxy: Optional[str] = None,
    huge_tree: bool = False,
    **kwargs: Any,
) -> WebDAVProvider:
    """
    Get a WebDAV provider, ready to use.

    Connection parameters not given explicitly are taken from the
    environment (CLOUDACCESS_WEBDAV_URL, CLOUDACCESS_WEBDAV_USERNAME,
    CLOUDACCESS_WEBDAV_PASSWORD) or the config file, see
    cloudaccess.config.get_connection_params().

    Args:
        url: Base URL of the WebDAV root.
        username: Username for authentication.
        password: Password, or token for bearer authentication.
        probe: Verify connectivity with an OPTIONS request (default: True).
        proxy: Proxy server (scheme://hostname:port).
        huge_tree: Allow very large PROPFIND responses.
        **kwargs: Further WebDAVCredential fields or config lookup options.

    Raises:
        ValueError: No URL was given or configured.
        NotConnectedError, HTTPStatusError: The probe failed.
    """
    credential = config.get_webdav_credential(
        url=url, username=username, password=password, **kwargs
    )
    if credential is None:
        raise ValueError(
            "URL is required. Provide via url parameter or CLOUDACCESS_WEBDAV_URL environment variable."
        )

    client = WebDAVClient(credential, proxy=proxy, huge_tree=huge_tree)

    if probe:
        try:
            await client.check_connection()
        except BaseException:
            await client.close()
            raise

    return WebDAVProvider(client)


__all__ = [
    "WebDAVClient",
    "WebDAVCredential",
    "WebDAVProvider",
    "WebDAVResponse",
    "get_webdav_provider",
]
