#!/usr/bin/env python
import logging
from enum import Enum
from typing import ClassVar
from typing import Optional

from cloudaccess import __version__

debug_dump_communication = False
try:
    import os

    ## Environmental variables prepended with "PYTHON_CLOUDACCESS" are used for debug purposes,
    ## environmental variables prepended with "CLOUDACCESS_" are for connection parameters
    debug_dump_communication = os.environ.get("PYTHON_CLOUDACCESS_COMMDUMP", False)
    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["PYTHON_CLOUDACCESS_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("cloudaccess")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons):
    from cloudaccess.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue, include this error and the traceback (if any) and tell what server you are using"


## Transport and adapter-internal failures.  These are never part of the
## canonical taxonomy below; callers should treat them as generic failures.


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class HTTPStatusError(DAVError):
    """
    The server answered with a status code of 400 or above.  The
    status property holds the numeric code, which the provider
    adapters match against their per-operation tables.
    """

    status: int = 0

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(url=url, reason=reason)
        if status is not None:
            self.status = status

    def __str__(self) -> str:
        return "%s at '%s', status %s, reason %s" % (
            self.__class__.__name__,
            self.url,
            self.status,
            self.reason,
        )


class AuthorizationError(HTTPStatusError):
    """
    The client encountered an HTTP 401 or 403 error and is passing it on
    to the user. The url property will contain the url in question,
    the reason property will contain the excuse the server sent.
    """

    pass


class NotConnectedError(DAVError):
    """The transport could not reach the server at all."""

    pass


class WebDAVProviderError(DAVError):
    pass


class InvalidResponseError(WebDAVProviderError):
    pass


class ResolvingURLFailedError(WebDAVProviderError):
    pass


## Canonical, backend-independent failures.  Upper layers may only
## branch on these.


class CloudProviderErrorKind(str, Enum):
    ITEM_NOT_FOUND = "itemNotFound"
    ITEM_ALREADY_EXISTS = "itemAlreadyExists"
    ITEM_TYPE_MISMATCH = "itemTypeMismatch"
    PARENT_FOLDER_DOES_NOT_EXIST = "parentFolderDoesNotExist"
    PAGE_TOKEN_INVALID = "pageTokenInvalid"
    QUOTA_INSUFFICIENT = "quotaInsufficient"
    UNAUTHORIZED = "unauthorized"
    NO_INTERNET_CONNECTION = "noInternetConnection"


class CloudProviderError(Exception):
    kind: ClassVar[CloudProviderErrorKind]
    path: Optional[str] = None

    def __init__(self, path: Optional[object] = None) -> None:
        if path is not None:
            self.path = str(path)
        super().__init__(self.kind.value)

    def __str__(self) -> str:
        if self.path is None:
            return self.kind.value
        return "%s at '%s'" % (self.kind.value, self.path)


class ItemNotFoundError(CloudProviderError):
    kind = CloudProviderErrorKind.ITEM_NOT_FOUND


class ItemAlreadyExistsError(CloudProviderError):
    kind = CloudProviderErrorKind.ITEM_ALREADY_EXISTS


class ItemTypeMismatchError(CloudProviderError):
    kind = CloudProviderErrorKind.ITEM_TYPE_MISMATCH


class ParentFolderDoesNotExistError(CloudProviderError):
    kind = CloudProviderErrorKind.PARENT_FOLDER_DOES_NOT_EXIST


class PageTokenInvalidError(CloudProviderError):
    kind = CloudProviderErrorKind.PAGE_TOKEN_INVALID


class QuotaInsufficientError(CloudProviderError):
    kind = CloudProviderErrorKind.QUOTA_INSUFFICIENT


class UnauthorizedError(CloudProviderError):
    kind = CloudProviderErrorKind.UNAUTHORIZED


class NoInternetConnectionError(CloudProviderError):
    kind = CloudProviderErrorKind.NO_INTERNET_CONNECTION


exception_by_kind = {
    cls.kind: cls
    for cls in (
        ItemNotFoundError,
        ItemAlreadyExistsError,
        ItemTypeMismatchError,
        ParentFolderDoesNotExistError,
        PageTokenInvalidError,
        QuotaInsufficientError,
        UnauthorizedError,
        NoInternetConnectionError,
    )
}
