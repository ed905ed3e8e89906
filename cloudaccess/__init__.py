#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .cloudpath import CloudPath
from .items import CloudItemList
from .items import CloudItemMetadata
from .items import CloudItemType
from .lib.error import CloudProviderError
from .lib.error import CloudProviderErrorKind
from .provider import CloudProvider
from .webdav import get_webdav_provider
from .webdav import WebDAVClient
from .webdav import WebDAVCredential
from .webdav import WebDAVProvider

# Silence notification of no default logging handler
log = logging.getLogger("cloudaccess")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "CloudPath",
    "CloudItemList",
    "CloudItemMetadata",
    "CloudItemType",
    "CloudProvider",
    "CloudProviderError",
    "CloudProviderErrorKind",
    "WebDAVClient",
    "WebDAVCredential",
    "WebDAVProvider",
    "get_webdav_provider",
]
