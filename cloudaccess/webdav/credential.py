"""
Connection parameters for one WebDAV account.

A credential is a plain value object owned by the caller and handed to
the WebDAVClient constructor.  Storing credentials is up to the caller.
"""
from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Union
from urllib.parse import unquote

from cloudaccess.lib.auth import select_auth_type
from cloudaccess.lib.auth import SUPPORTED_AUTH_TYPES
from cloudaccess.lib.url import URL


@dataclass(frozen=True)
class WebDAVCredential:
    """
    Attributes:
        base_url: URL of the WebDAV root all cloud paths are relative to.
            Credentials embedded in the URL are used if username and
            password are not given.
        username: Username for basic/digest authentication.
        password: Password, or the token for bearer authentication.
        auth_type: 'basic', 'digest' or 'bearer'.  Chosen from the
            given credentials if left out.
        ssl_verify_cert: SSL certificate verification (bool or CA bundle path).
        ssl_cert: Client SSL certificate (path or (cert, key) tuple).
        timeout: Request timeout in seconds.
        headers: Additional headers for all requests.
    """

    base_url: str
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    auth_type: Optional[str] = None
    ssl_verify_cert: Union[bool, str] = True
    ssl_cert: Union[str, Tuple[str, str], None] = None
    timeout: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url is required")
        url = URL.objectify(self.base_url)
        if url.scheme not in ("http", "https"):
            raise ValueError(f"Unsupported URL scheme in {self.base_url}")

        ## Use explicit None check to preserve empty strings (servers with no auth)
        if self.username is None and url.username:
            object.__setattr__(self, "username", unquote(url.username))
        if self.password is None and url.password:
            object.__setattr__(self, "password", unquote(url.password))

        if self.auth_type is None:
            object.__setattr__(
                self,
                "auth_type",
                select_auth_type(bool(self.username), bool(self.password)),
            )
        elif self.auth_type not in SUPPORTED_AUTH_TYPES:
            raise ValueError(f"Unsupported auth type: {self.auth_type}")

    @property
    def url(self) -> URL:
        """The base URL without credentials, always ending with a slash."""
        url = URL.objectify(self.base_url)
        if url.is_auth():
            url = url.unauth()
        return url.ensure_trailing_slash()
