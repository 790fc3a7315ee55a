"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT THE SPA HANDLER READS                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /app/users/42?tab=profile HTTP/1.1                            │
    │       ────────┬──────── ────┬────                                   │
    │               │             └── query_string (ignored for routing)  │
    │               └── path (URL-decoded, NOT yet cleaned)               │
    │                                                                      │
    │   Host: example.com                                                  │
    │   X-Forwarded-Prefix: /app      ─┐                                  │
    │   X-Forwarded-Uri: /app/users/42 ├─ base path resolution            │
    │   If-Modified-Since: ...         ├─ conditional GET                 │
    │   Range: bytes=0-1023           ─┘  partial content                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PATH TRAVERSAL
=============================================================================

The parser does NOT reject paths containing "..". It only URL-decodes
them. The SPA handler cleans every path lexically against a virtual
root ("/" + path) before touching the asset hierarchy, so

    GET /../../etc/passwd   →   /etc/passwd   (inside the asset root)

Rejecting ".." here as well would turn harmless client-side routes such
as /docs/../guide into 400s instead of serving the app.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlparse, unquote
import re


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code to send back to the client:

        400 Bad Request                 - Malformed request syntax
        405 Method Not Allowed          - Unknown method
        413 Payload Too Large           - Request exceeds size limit
        505 HTTP Version Not Supported  - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         HTTP method ("GET", "HEAD", ...)
        path:           URL-decoded request path without query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header dict with LOWERCASE keys. Repeated headers
                        are merged into one comma-separated value.
        query_string:   Raw query string ("" when absent)
        body:           Raw request body
        client_address: (ip, port) of the client
        raw:            The unparsed request bytes

    Handlers treat requests as values: the SPA handler derives a cleaned
    copy with dataclasses.replace() instead of editing the caller's object.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        Check if this connection should be kept alive.

        HTTP/1.1 keeps alive unless "Connection: close" is sent.
        HTTP/1.0 closes unless "Connection: keep-alive" is sent.
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    # =========================================================================
    # ACCESSOR METHODS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            prefix = request.get_header("X-Forwarded-Prefix")
        """
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw Request Bytes
              │
              ▼
        1. Size check             too large?       → 413
        2. Find \\r\\n\\r\\n      missing?         → 400
        3. Parse request line     bad method/ver?  → 405/505
        4. Parse headers          names lowercased, duplicates merged
        5. Extract body           exactly Content-Length bytes
              │
              ▼
        HTTPRequest dataclass
    """

    VALID_METHODS = {
        "GET",
        "HEAD",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "OPTIONS",
        "TRACE",
        "CONNECT",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Maximum allowed request size in bytes.
                              Larger requests are rejected with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        if not lines or not lines[0]:
            raise HTTPParseError("Empty request")

        method, path, query_string, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']!r}"
            )
        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        # Anything past Content-Length belongs to the next pipelined request
        body = body[:content_length]

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_string=query_string,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str, str]:
        """
        Parse the HTTP request line.

            "GET /users?page=1 HTTP/1.1"
             ─┬─ ─────┬─────── ────┬────
              │       │            │
            Method   URI       Version

        Returns:
            Tuple of (method, path, query_string, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        if uri.startswith("/"):
            # Origin form; urlparse would read "//host/x" as a netloc
            raw_path, _, query = uri.partition("?")
            raw_path = raw_path.partition("#")[0]
            query = query.partition("#")[0]
        else:
            parsed = urlparse(uri)
            raw_path, query = parsed.path, parsed.query

        path = unquote(raw_path) or "/"

        return method, path, query, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse HTTP headers into a dictionary with lowercase names.

        Obsolete line folding (continuation lines starting with whitespace)
        is joined onto the previous header. A header sent several times is
        merged into one comma-separated value:

            X-Forwarded-Prefix: /outer
            X-Forwarded-Prefix: /inner   →   {"x-forwarded-prefix": "/outer, /inner"}
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024
) -> HTTPRequest:
    """Parse an HTTP request with a one-off RequestParser."""
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
