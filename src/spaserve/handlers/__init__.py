"""
=============================================================================
HANDLERS MODULE
=============================================================================

A handler takes an HTTPRequest and returns an HTTPResponse.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Handler             │ Serves                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ SPAHandler          │ static assets, else the rewritten index       │
    │ StaticFileHandler   │ regular files from an asset hierarchy         │
    │ serve_content()     │ any in-memory blob, with conditional GET,     │
    │                     │ Range and HEAD support                        │
    └─────────────────────────────────────────────────────────────────────┘

    from spaserve.handlers import SPAHandler

    spa = SPAHandler(assets, "index.html")
    response = spa(request)

=============================================================================
"""

from .spa import SPAHandler, IndexRewriter
from .static import (
    StaticFileHandler,
    serve_content,
    parse_range,
    etag_matches,
    ByteRange,
    RangeNotSatisfiable,
)

__all__ = [
    "SPAHandler",
    "IndexRewriter",
    "StaticFileHandler",
    "serve_content",
    "parse_range",
    "etag_matches",
    "ByteRange",
    "RangeNotSatisfiable",
]
