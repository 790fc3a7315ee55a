"""
=============================================================================
spaserve: SINGLE PAGE APPLICATION SERVER
=============================================================================

Serves an SPA bundle (a static asset tree plus one index document) so that
client-side routers own the URL space, and works behind any chain of
reverse proxies by rewriting the index document's <base href>.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /static/js/app.js   →  the file                               │
    │   GET /users/42           →  index.html                             │
    │   GET /users/42                                                     │
    │     X-Forwarded-Prefix: /app  →  index.html with                    │
    │                                  <base href="/app/" />              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    spaserve/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m spaserve)
    ├── server.py            # SPAServer
    ├── config.py            # SPAConfig dataclass
    ├── paths.py             # Lexical slash-path cleaning
    ├── assets.py            # Asset hierarchies (directory, in-memory)
    ├── proxy.py             # Forwarding headers → base path
    ├── rewrite.py           # <base href> rewriting
    ├── errors.py            # Sanitized error responses
    ├── handlers/
    │   ├── spa.py           # SPAHandler
    │   └── static.py        # StaticFileHandler, serve_content
    ├── http/                # Request parsing, responses, status, MIME
    ├── core/                # Sockets, connections, thread pool
    └── middleware/          # Pipeline, access logging

=============================================================================
QUICK START
=============================================================================

    # Command line
    python -m spaserve ./dist --port 3000

    # As a library, inside your own server
    from spaserve import SPAHandler, DirectoryAssets

    spa = SPAHandler(DirectoryAssets("./dist"), "index.html")
    response = spa(request)

=============================================================================
"""

__version__ = "1.0.0"

from .assets import AssetFS, AssetInfo, DirectoryAssets, MemoryAssets, InvalidAssetPath
from .config import SPAConfig
from .errors import normalized_http_error
from .handlers import SPAHandler, IndexRewriter, StaticFileHandler, serve_content
from .http import HTTPRequest, HTTPResponse, HTTPStatus
from .paths import clean_path, join_path
from .proxy import ProxyContext, original_request_path, basename
from .rewrite import rewrite_base_href
from .server import SPAServer, create_server

__all__ = [
    "__version__",
    "AssetFS",
    "AssetInfo",
    "DirectoryAssets",
    "MemoryAssets",
    "InvalidAssetPath",
    "SPAConfig",
    "normalized_http_error",
    "SPAHandler",
    "IndexRewriter",
    "StaticFileHandler",
    "serve_content",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatus",
    "clean_path",
    "join_path",
    "ProxyContext",
    "original_request_path",
    "basename",
    "rewrite_base_href",
    "SPAServer",
    "create_server",
]
