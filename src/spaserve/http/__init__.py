"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The HTTP/1.1 layer of spaserve: bytes in, HTTPRequest out; HTTPResponse
in, bytes out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /app/users HTTP/1.1\\r\\n..."  →  HTTPRequest(path=...)      │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE BUILDER (response.py)                                      │
    │   ResponseBuilder().status(...).body(...)  →  HTTPResponse          │
    │   format_http_date / parse_http_date                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus.NOT_FOUND → 404, phrase="Not Found"                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ MIME TYPES (mime_types.py)                                          │
    │   "static/js/app.js" → "text/javascript; charset=utf-8"             │
    └─────────────────────────────────────────────────────────────────────┘

There is no router: an SPA server has exactly one handler, and the
client-side router owns the URL space.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    parse_http_date,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type, is_text_type

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",
    "parse_http_date",
    "HTTPStatus",
    "get_mime_type",
    "get_content_type",
    "is_text_type",
]
