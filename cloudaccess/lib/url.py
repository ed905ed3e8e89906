#!/usr/bin/env python
import sys
from typing import Optional
from typing import Union
from urllib.parse import quote
from urllib.parse import SplitResult
from urllib.parse import urlsplit

from cloudaccess.lib.python_utilities import to_normal_str

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

## RFC 3986 pchar plus the path separator
PATH_SAFE_CHARACTERS = "/!$&'()*+,;=:@-._~"


class URL:
    """
    Wraps a URL string or a urllib split result.  Used internally by
    the WebDAV client and parser; end users should not need to know
    anything about this class.  Cloud paths never travel as URLs, the
    WebDAV provider resolves them against the base URL of its client
    right before a request is sent.

    Attributes of the split result (scheme, netloc, path, hostname,
    port, username, password ...) are available on the object itself.
    A ";" in the path stays part of the path.
    """

    def __init__(self, url: Union[str, bytes, SplitResult]) -> None:
        if isinstance(url, SplitResult):
            self.url_parsed: Optional[SplitResult] = url
            self.url_raw: Optional[str] = None
        else:
            self.url_raw = to_normal_str(url)
            self.url_parsed = None

    @classmethod
    def objectify(cls, url: Union[Self, str, SplitResult, None]) -> Optional["URL"]:
        if url is None or isinstance(url, URL):
            return url
        return URL(url)

    def __getattr__(self, attr: str):
        ## only reached for attributes not set in __init__
        if "url_parsed" not in vars(self):
            raise AttributeError(attr)
        return getattr(self.url_parsed_or_parse(), attr)

    def __str__(self) -> str:
        if self.url_raw is None:
            self.url_raw = self.url_parsed.geturl()
        return self.url_raw

    def __repr__(self) -> str:
        return "URL(%s)" % str(self)

    def url_parsed_or_parse(self) -> SplitResult:
        if self.url_parsed is None:
            self.url_parsed = urlsplit(self.url_raw)
        return self.url_parsed

    def ensure_trailing_slash(self) -> "URL":
        if self.path.endswith("/"):
            return self
        return URL(self.url_parsed_or_parse()._replace(path=self.path + "/"))

    def is_auth(self) -> bool:
        return self.username is not None

    def unauth(self) -> "URL":
        """The same URL without user name and password."""
        if not self.is_auth():
            return self
        netloc = self.hostname
        if ":" in netloc:
            netloc = "[%s]" % netloc
        if self.port:
            netloc += ":%s" % self.port
        return URL(self.url_parsed_or_parse()._replace(netloc=netloc))

    def join(self, path: object) -> "URL":
        """
        Resolve an href from a server response against this base URL.
        An absolute path replaces the path of the base, a relative one
        is appended to it.  A full URL pointing to another scheme, host
        or port raises ValueError.
        """
        if not path or not str(path):
            return self
        other = URL.objectify(path)
        if (
            (other.scheme and self.scheme and other.scheme != self.scheme)
            or (other.hostname and self.hostname and other.hostname != self.hostname)
            or (other.port and self.port and other.port != self.port)
        ):
            raise ValueError("%s can't be joined with %s" % (self, other))

        if other.path.startswith("/"):
            joined_path = other.path
        else:
            sep = "" if self.path.endswith("/") else "/"
            joined_path = self.path + sep + other.path
        return URL(
            SplitResult(
                self.scheme or other.scheme,
                self.netloc or other.netloc,
                joined_path,
                other.query,
                other.fragment,
            )
        )

    def append_path(self, quoted_path: str) -> "URL":
        """
        Append an already percent-encoded relative path to the path of
        this URL.  Unlike join(), the appended text is never parsed as a
        URL of its own, so a segment like "a:b" can not be mistaken for
        a scheme.
        """
        if not quoted_path:
            return self
        base = self.url_parsed_or_parse()
        sep = "" if base.path.endswith("/") else "/"
        return URL(base._replace(path=base.path + sep + quoted_path, query="", fragment=""))


def quote_path(path: str) -> str:
    """
    Percent-encode a cloud path for use in a request URL.

    Raises UnicodeEncodeError for text that has no UTF-8 form (lone
    surrogates).
    """
    return quote(path, safe=PATH_SAFE_CHARACTERS)
