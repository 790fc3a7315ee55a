"""
=============================================================================
BASE PATH RESOLUTION BEHIND REVERSE PROXIES
=============================================================================

An SPA needs to know the URL prefix it is mounted under, so that relative
asset URLs and the client-side router resolve against the right base.
The server only sees the path the (last) proxy forwarded to it, so the
prefix has to be reconstructed.

=============================================================================
TWO KINDS OF PROXY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  PATH-STRIPPING PROXY                                               │
    │  ─────────────────────────────────────────────────────────────────  │
    │                                                                      │
    │   browser  GET /app/users/42                                        │
    │      │                                                               │
    │      ▼                                                               │
    │   proxy    strips "/app", adds X-Forwarded-Prefix: /app             │
    │      │                                                               │
    │      ▼                                                               │
    │   spaserve GET /users/42                                            │
    │                                                                      │
    │   original path = /app + /users/42 = /app/users/42                  │
    │   base          = /app/users/42 minus /users/42 = /app/             │
    │                                                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │  PATH-PRESERVING PROXY (e.g. forward-auth setups)                   │
    │  ─────────────────────────────────────────────────────────────────  │
    │                                                                      │
    │   spaserve GET /users/42                                            │
    │            X-Forwarded-Uri: https://example.com/app/users/42        │
    │                                                                      │
    │   original path = /app/users/42                                     │
    │   base          = /app/                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

X-Forwarded-Prefix wins when both headers are present. When the
original path does not end with the request path (a proxy rewrote the
path in some other way), the base silently degrades to "/".

=============================================================================
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from .http.request import HTTPRequest
from .paths import clean_path, join_path


logger = logging.getLogger(__name__)


FORWARDED_PREFIX_HEADER = "X-Forwarded-Prefix"
FORWARDED_URI_HEADER = "X-Forwarded-Uri"


def _first_value(header_value: str) -> str:
    # Repeated headers arrive merged as "a, b"; the outermost proxy sent "a"
    return header_value.split(",", 1)[0].strip()


@dataclass(frozen=True)
class ProxyContext:
    """
    The forwarding headers of one request, captured once.

    Attributes:
        forwarded_prefix: X-Forwarded-Prefix value ("" when absent)
        forwarded_uri: X-Forwarded-Uri value ("" when absent)

    Usage:
        ctx = ProxyContext.from_request(request)
        base = ctx.base_path(request.path)    # e.g. "/app/"
    """

    forwarded_prefix: str = ""
    forwarded_uri: str = ""

    @classmethod
    def from_request(cls, request: HTTPRequest) -> "ProxyContext":
        return cls(
            forwarded_prefix=_first_value(request.get_header(FORWARDED_PREFIX_HEADER)),
            forwarded_uri=_first_value(request.get_header(FORWARDED_URI_HEADER)),
        )

    def original_path(self, request_path: str) -> str:
        """The path the client requested before any proxy touched it."""
        return original_request_path(request_path, self)

    def base_path(self, request_path: str) -> str:
        """The URL prefix the SPA is served under, always ending in "/"."""
        return basename(request_path, self)


def original_request_path(request_path: str, ctx: ProxyContext) -> str:
    """
    Reconstruct the client's original request path.

    1. X-Forwarded-Prefix set:  cleaned prefix joined with request_path
    2. X-Forwarded-Uri set:     a rooted value is cleaned as-is; anything
                                else is parsed as a URL and its path used.
                                An unparseable URL is ignored.
    3. Otherwise:               request_path itself

    Examples:
        >>> original_request_path("/foo", ProxyContext(forwarded_prefix="/prefix"))
        '/prefix/foo'

        >>> original_request_path("/", ProxyContext(forwarded_uri="http://foo.bar:12345/prefix/"))
        '/prefix'
    """
    if ctx.forwarded_prefix:
        return join_path(clean_path("/" + ctx.forwarded_prefix), request_path)

    if ctx.forwarded_uri:
        if ctx.forwarded_uri.startswith("/"):
            return clean_path(ctx.forwarded_uri)
        try:
            parsed = urlsplit(ctx.forwarded_uri)
        except ValueError:
            logger.debug("Ignoring unparseable %s: %r", FORWARDED_URI_HEADER, ctx.forwarded_uri)
        else:
            return clean_path("/" + parsed.path)

    return request_path


def basename(request_path: str, ctx: ProxyContext) -> str:
    """
    Derive the base path the SPA is mounted under.

    The base is whatever the original path has in front of the request
    path:

        original  /prefix/foo/bar
        request          /foo/bar
        base      /prefix/

    Examples:
        >>> basename("/foo/bar", ProxyContext())
        '/'

        >>> basename("/foo/bar", ProxyContext(forwarded_prefix="/foo/"))
        '/foo/'
    """
    original = original_request_path(request_path, ctx)

    if request_path.endswith("/") and not original.endswith("/"):
        original += "/"

    if original.endswith(request_path):
        base = original[:len(original) - len(request_path)]
    else:
        base = ""

    if not base.endswith("/"):
        base += "/"

    return base
