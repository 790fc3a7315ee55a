"""
=============================================================================
STATIC CONTENT SERVING
=============================================================================

Two layers:

    serve_content(request, name, modified, content, ...)
        Turns an in-memory blob into a response, honouring conditional
        and range requests. Used for static assets AND for the rewritten
        index document.

    StaticFileHandler(assets)
        Looks a request path up in an asset hierarchy and hands the
        file to serve_content() with an ETag and Cache-Control.

=============================================================================
CONDITIONAL REQUESTS
=============================================================================

Checked in this order; the first one that decides wins:

    ┌─────────────────────────┬──────────────────────────────────────────┐
    │ If-Unmodified-Since     │ modified after the date     → 412        │
    │ If-None-Match           │ any tag matches (or "*")    → 304 (GET,  │
    │                         │                               HEAD)      │
    │                         │                             → 412 other  │
    │ If-Modified-Since       │ not modified since the date → 304        │
    │ (ignored when           │ (GET and HEAD only)                      │
    │  If-None-Match is sent) │                                          │
    └─────────────────────────┴──────────────────────────────────────────┘

Dates compare at one-second resolution, since that is all an HTTP-date
can express.

=============================================================================
RANGE REQUESTS
=============================================================================

    Range: bytes=0-99      first 100 bytes
    Range: bytes=100-      everything from byte 100
    Range: bytes=-100      last 100 bytes

    satisfiable      → 206 Partial Content
                       Content-Range: bytes 0-99/5120
    past the end     → 416 Range Not Satisfiable
                       Content-Range: bytes */5120
    malformed, or    → ignored, full 200
    several ranges

If-Range with a date or ETag that no longer matches disables range
handling, so a client never stitches together pieces of two versions.

=============================================================================
"""

import errno
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..assets import AssetFS
from ..errors import normalized_http_error
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, format_http_date, parse_http_date
from ..http.status_codes import HTTPStatus
from ..http.mime_types import get_content_type
from ..paths import clean_path


logger = logging.getLogger(__name__)


# =============================================================================
# BYTE RANGES
# =============================================================================

class RangeNotSatisfiable(ValueError):
    """Raised when a well-formed byte range lies entirely past the content."""


@dataclass(frozen=True)
class ByteRange:
    """An inclusive byte range [start, end] within content of a known size."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


def parse_range(header: str, size: int) -> Optional[ByteRange]:
    """
    Parse a Range header for content of the given size.

    Returns None when the header should be ignored (malformed, not in
    bytes, or asking for several ranges).

    Raises:
        RangeNotSatisfiable: for a valid range that starts past the end.

    Examples:
        >>> parse_range("bytes=0-99", 5120)
        ByteRange(start=0, end=99)

        >>> parse_range("bytes=-100", 5120)
        ByteRange(start=5020, end=5119)

        >>> parse_range("bytes=0-1,5-6", 5120) is None
        True
    """
    unit, _, ranges = header.strip().partition("=")
    if unit.strip().lower() != "bytes" or not ranges:
        return None

    if "," in ranges:
        return None

    first, sep, last = ranges.strip().partition("-")
    if not sep:
        return None
    first, last = first.strip(), last.strip()

    if not first:
        # Suffix range: the last N bytes
        if not last.isdigit():
            return None
        suffix = int(last)
        if suffix == 0:
            raise RangeNotSatisfiable(header)
        suffix = min(suffix, size)
        return ByteRange(start=size - suffix, end=size - 1)

    if not first.isdigit() or (last and not last.isdigit()):
        return None

    start = int(first)
    end = int(last) if last else size - 1
    if last and end < start:
        return None
    if start >= size:
        raise RangeNotSatisfiable(header)

    return ByteRange(start=start, end=min(end, size - 1))


# =============================================================================
# ETAGS
# =============================================================================

def _strip_weak(tag: str) -> str:
    return tag[2:] if tag.startswith("W/") else tag


def etag_matches(header: str, etag: Optional[str]) -> bool:
    """
    Weak comparison of an If-None-Match list against etag.

        etag_matches('"a", W/"b"', '"b"')  → True
        etag_matches('*', '"anything"')    → True
    """
    if not etag:
        return False

    for candidate in header.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate and _strip_weak(candidate) == _strip_weak(etag):
            return True
    return False


def _truncate(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


# =============================================================================
# SERVE CONTENT
# =============================================================================

def serve_content(
    request: HTTPRequest,
    name: str,
    modified: datetime,
    content: bytes,
    etag: Optional[str] = None,
    cache_control: Optional[str] = None,
) -> HTTPResponse:
    """
    Build the response for serving content named name.

    Args:
        request: The request being answered (method and conditional headers).
        name: File name used to pick the Content-Type.
        modified: Last modification time, sent as Last-Modified.
        content: The complete representation.
        etag: Optional quoted entity tag.
        cache_control: Optional Cache-Control value.

    Returns:
        200, 206, 304, 412 or 416 response. HEAD requests get the same
        headers as GET (including Content-Length) and an empty body.
    """
    modified = _truncate(modified)
    size = len(content)
    is_get_or_head = request.method in ("GET", "HEAD")

    validators = {"Last-Modified": format_http_date(modified)}
    if etag:
        validators["ETag"] = etag
    if cache_control:
        validators["Cache-Control"] = cache_control

    # ─────────────────────────────────────────────────────────────────────
    # PRECONDITIONS
    # ─────────────────────────────────────────────────────────────────────
    if_unmodified_since = parse_http_date(request.get_header("If-Unmodified-Since"))
    if if_unmodified_since is not None and modified > if_unmodified_since:
        return (ResponseBuilder()
            .status(HTTPStatus.PRECONDITION_FAILED)
            .build())

    if_none_match = request.get_header("If-None-Match")
    if if_none_match:
        if etag_matches(if_none_match, etag):
            if is_get_or_head:
                return _not_modified(validators)
            return (ResponseBuilder()
                .status(HTTPStatus.PRECONDITION_FAILED)
                .build())
    elif is_get_or_head:
        if_modified_since = parse_http_date(request.get_header("If-Modified-Since"))
        if if_modified_since is not None and modified <= if_modified_since:
            return _not_modified(validators)

    # ─────────────────────────────────────────────────────────────────────
    # RANGE
    # ─────────────────────────────────────────────────────────────────────
    builder = (ResponseBuilder()
        .content_type(get_content_type(name))
        .headers(validators)
        .header("Accept-Ranges", "bytes"))

    byte_range = None
    range_header = request.get_header("Range")
    if range_header and size > 0 and is_get_or_head and _if_range_allows(request, modified, etag):
        try:
            byte_range = parse_range(range_header, size)
        except RangeNotSatisfiable:
            logger.debug("Unsatisfiable range %r for %s (%d bytes)", range_header, name, size)
            return (ResponseBuilder()
                .status(HTTPStatus.RANGE_NOT_SATISFIABLE)
                .headers(validators)
                .header("Content-Range", f"bytes */{size}")
                .build())

    if byte_range is not None:
        body = content[byte_range.start:byte_range.end + 1]
        builder.status(HTTPStatus.PARTIAL_CONTENT)
        builder.header("Content-Range", byte_range.content_range(size))
    else:
        body = content
        builder.status(HTTPStatus.OK)

    builder.header("Content-Length", str(len(body)))

    if request.method == "HEAD":
        return builder.build()
    return builder.body(body).build()


def _not_modified(validators: dict) -> HTTPResponse:
    headers = dict(validators)
    if "ETag" in headers:
        # The tag already identifies the version
        headers.pop("Last-Modified")
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_MODIFIED)
        .headers(headers)
        .build())


def _if_range_allows(request: HTTPRequest, modified: datetime, etag: Optional[str]) -> bool:
    if_range = request.get_header("If-Range")
    if not if_range:
        return True

    if if_range.startswith('"') or if_range.startswith("W/"):
        # Strong comparison only
        return bool(etag) and not etag.startswith("W/") and if_range == etag

    since = parse_http_date(if_range)
    return since is not None and since == modified


# =============================================================================
# STATIC FILE HANDLER
# =============================================================================

class StaticFileHandler:
    """
    Handler for serving regular files out of an asset hierarchy.

        Request: GET /static/js/app.js

        1. Clean the path against "/" and strip the slash → static/js/app.js
        2. stat() it; anything but a regular file         → 404
        3. Read it fully and hand it to serve_content()
           with ETag "<mtime>-<size>" and Cache-Control

    Asset errors (missing, permission denied, I/O failure) are turned
    into sanitized responses by normalized_http_error().

    Usage:
        static = StaticFileHandler(DirectoryAssets("/opt/myspa"), cache_max_age=86400)
        response = static.handle(request)
    """

    def __init__(self, assets: AssetFS, cache_max_age: int = 3600):
        self.assets = assets
        self.cache_max_age = cache_max_age

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        path = clean_path("/" + request.path)[1:] or "."

        try:
            info = self.assets.stat(path)
            if not info.is_file:
                raise FileNotFoundError(errno.ENOENT, "not a regular file", path)

            info, content = self.assets.read(path)
        except (OSError, ValueError) as e:
            return normalized_http_error(e)

        etag = f'"{int(info.mtime.timestamp())}-{info.size}"'

        return serve_content(
            request,
            name=info.name,
            modified=info.mtime,
            content=content,
            etag=etag,
            cache_control=f"public, max-age={self.cache_max_age}",
        )

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# serve_content() knows nothing about files; it serves bytes plus
# validators. That is what lets the SPA handler push a freshly rewritten
# index document through the same conditional/range machinery as any
# static asset.
#
# PRODUCTION TIPS:
# - Fingerprinted asset names (main.4f1c.js) can take a long max-age
# - The index document should NOT be cached long: it names the assets
# =============================================================================
