"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

HTTPResponse is the value every handler returns. ResponseBuilder is the
fluent way to construct one.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 RESPONSES AN SPA SERVER SENDS                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  STATIC ASSET                                                        │
    │    HTTP/1.1 200 OK                                                   │
    │    Content-Type: text/javascript; charset=utf-8                      │
    │    Last-Modified: Thu, 01 Jan 2026 12:00:00 GMT                      │
    │    ETag: "1767268800-5120"                                           │
    │    Cache-Control: public, max-age=3600                               │
    │    Accept-Ranges: bytes                                              │
    │                                                                      │
    │  REWRITTEN INDEX                                                     │
    │    HTTP/1.1 200 OK                                                   │
    │    Content-Type: text/html; charset=utf-8                            │
    │    Last-Modified: Thu, 01 Jan 2026 12:00:00 GMT                      │
    │    Vary: X-Forwarded-Prefix, X-Forwarded-Uri                         │
    │                                                                      │
    │  SANITIZED ERROR                                                     │
    │    HTTP/1.1 404 Not Found                                            │
    │    Content-Type: text/plain; charset=utf-8                           │
    │    X-Content-Type-Options: nosniff                                   │
    │                                                                      │
    │    404 page not found                                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HTTP DATES
=============================================================================

Last-Modified, If-Modified-Since, If-Unmodified-Since and If-Range all
use the IMF-fixdate format, always in GMT, with one-second resolution:

    Thu, 01 Jan 2026 12:00:00 GMT

format_http_date() writes it, parse_http_date() reads it (plus the
obsolete RFC 850 and asctime forms, via email.utils).

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Dict, Union

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "spaserve/1.0"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line, e.g. "HTTP/1.1 200 OK".
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value (case-insensitive lookup)."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header.

        Returns self for method chaining:
            response.set_header("Vary", "X-Forwarded-Prefix").set_header(...)
        """
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the response body, encoding strings as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the response to bytes for sending over socket.

            HTTP/1.1 200 OK\\r\\n           ← Status line
            Content-Type: text/html\\r\\n
            Content-Length: 512\\r\\n       ← Auto-calculated unless set
            Date: Thu, 01 Jan 2026 ...\\r\\n ← Auto-added
            Server: spaserve/1.0\\r\\n      ← Auto-added
            \\r\\n
            <!doctype html>...              ← Body bytes

        A Content-Length set by the handler wins over the body length.
        HEAD responses rely on this: they advertise the size of the body
        they would have sent while sending none. 304 responses get no
        Content-Length at all.
        """
        response_headers = dict(self.headers)

        if (
            self.status != HTTPStatus.NOT_MODIFIED
            and "Content-Length" not in response_headers
        ):
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (
            ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("text/html; charset=utf-8")
            .header("Vary", "X-Forwarded-Prefix, X-Forwarded-Uri")
            .body(html)
            .build()
        )

    Every method except build() and to_bytes() returns the builder.
    """

    def __init__(self, server_name: str = DEFAULT_SERVER_NAME):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body = b""
        self._server_name = server_name

    # =========================================================================
    # STATUS & HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        self._headers["Content-Type"] = content_type
        return self

    def last_modified(self, modified: datetime) -> "ResponseBuilder":
        """Set Last-Modified from a datetime (truncated to whole seconds)."""
        self._headers["Last-Modified"] = format_http_date(modified)
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Set a plain text body with its Content-Type."""
        self._headers["Content-Type"] = content_type
        self._body = text.encode("utf-8")
        return self

    def html(self, html: str) -> "ResponseBuilder":
        return self.text(html, content_type="text/html; charset=utf-8")

    # =========================================================================
    # CACHING
    # =========================================================================

    def no_cache(self) -> "ResponseBuilder":
        """Forbid caching (error responses, overload responses)."""
        self._headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        self._headers["Pragma"] = "no-cache"
        return self

    def cache(self, max_age: int = 3600) -> "ResponseBuilder":
        """Allow any cache to keep the response for max_age seconds."""
        self._headers["Cache-Control"] = f"public, max-age={max_age}"
        return self

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def keep_alive(self, timeout: int = 5, max_requests: int = 100) -> "ResponseBuilder":
        self._headers["Connection"] = "keep-alive"
        self._headers["Keep-Alive"] = f"timeout={timeout}, max={max_requests}"
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes(self._server_name)


# =============================================================================
# HTTP DATES
# =============================================================================

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231 IMF-fixdate).

    Aware datetimes are converted to UTC first; naive ones are assumed
    to already be UTC.

        >>> format_http_date(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
        'Thu, 01 Jan 2026 12:00:00 GMT'
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def parse_http_date(value: str) -> Optional[datetime]:
    """
    Parse an HTTP-date header value into an aware UTC datetime.

    Returns None for anything that is not a valid date, so callers can
    treat a garbled If-Modified-Since exactly like a missing one.
    """
    if not value:
        return None

    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
