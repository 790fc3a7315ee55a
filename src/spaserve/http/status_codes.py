"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes an SPA server actually emits, with their reason phrases.

    ┌────────────────────────────────────────────────────────────────────┐
    │                 STATUS CODES USED BY SPASERVE                      │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  2xx   │ 200 OK              - static asset or rewritten index     │
    │        │ 206 Partial Content - satisfiable Range request           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ 304 Not Modified    - If-None-Match / If-Modified-Since   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request     - unparseable request                 │
    │        │ 403 Forbidden       - asset not readable                  │
    │        │ 404 Not Found       - asset (or index) missing            │
    │        │ 408 Request Timeout - client too slow                     │
    │        │ 412 Precondition Failed - If-Unmodified-Since failed      │
    │        │ 413 Payload Too Large                                     │
    │        │ 416 Range Not Satisfiable                                 │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - anything unexpected           │
    │        │ 503 Service Unavailable   - worker queue full             │
    │        │ 505 HTTP Version Not Supported                            │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
INTERVIEW QUESTIONS ABOUT STATUS CODES
=============================================================================

Q: "Why does an SPA server answer 200 for /users/42 when no such file exists?"
A: "Because the path belongs to the client-side router. The server hands
   out index.html and the JavaScript app decides what /users/42 means.
   Only real asset errors (missing index, permission denied) become 4xx/5xx."

Q: "What's the difference between 304 and 412?"
A: "304 answers a cache revalidation on GET/HEAD: 'nothing changed, keep
   your copy'. 412 answers If-Unmodified-Since: 'the resource changed
   since the date you gave, so the precondition you set is false'."

Q: "When is 416 returned instead of ignoring the Range header?"
A: "When the range is syntactically valid but starts past the end of the
   resource. Malformed Range headers are ignored and get a full 200."

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_MODIFIED.phrase
        'Not Modified'
    """

    # =========================================================================
    # 2xx SUCCESS
    # =========================================================================
    OK = 200                            # Asset or index served in full
    PARTIAL_CONTENT = 206               # Single byte range served

    # =========================================================================
    # 3xx REDIRECTION
    # =========================================================================
    NOT_MODIFIED = 304                  # Client cache is still valid

    # =========================================================================
    # 4xx CLIENT ERRORS
    # =========================================================================
    BAD_REQUEST = 400                   # Malformed request syntax
    FORBIDDEN = 403                     # Asset exists but may not be read
    NOT_FOUND = 404                     # Asset doesn't exist
    METHOD_NOT_ALLOWED = 405            # Method not supported for resource
    REQUEST_TIMEOUT = 408               # Client took too long to send request
    PRECONDITION_FAILED = 412           # If-Unmodified-Since failed
    PAYLOAD_TOO_LARGE = 413             # Request too large
    RANGE_NOT_SATISFIABLE = 416         # Range starts past end of content

    # =========================================================================
    # 5xx SERVER ERRORS
    # =========================================================================
    INTERNAL_SERVER_ERROR = 500         # Catch-all
    SERVICE_UNAVAILABLE = 503           # Worker pool saturated
    HTTP_VERSION_NOT_SUPPORTED = 505    # Not HTTP/1.0 or HTTP/1.1

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx (success) status code."""
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """
        Check if this is an error status code (4xx or 5xx).

        The access log uses this to pick the log level.
        """
        return self >= 400


# =============================================================================
# REASON PHRASES
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PRECONDITION_FAILED: "Precondition Failed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
