"""
=============================================================================
SINGLE PAGE APPLICATION HANDLER
=============================================================================

Serves an SPA bundle: real files are served as they are, every other
path gets the index document, so the client-side router owns the URL
space.

=============================================================================
REQUEST FLOW
=============================================================================

    GET /app/../users/42
          │
          ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │ 1. CLEAN            "/" + path, lexically      → /users/42        │
    │                     (the only traversal defense, and it is total: │
    │                      a cleaned rooted path cannot climb out)      │
    └───────────────────────────────────────────────────────────────────┘
          │
          ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │ 2. CLASSIFY         stat("users/42")                              │
    │                                                                   │
    │      regular file          → StaticFileHandler        (handled)   │
    │      directory / missing   → fall through                         │
    │      permission / I/O      → sanitized 403 / 500      (handled)   │
    └───────────────────────────────────────────────────────────────────┘
          │ fall through
          ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │ 3. RESOLVE BASE     X-Forwarded-Prefix / X-Forwarded-Uri          │
    │                     → "/app/"   ("$" characters removed)          │
    └───────────────────────────────────────────────────────────────────┘
          │
          ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │ 4. REWRITE INDEX    <base href="/" />  →  <base href="/app/" />   │
    │                     then index_rewriter(request, html), if set    │
    └───────────────────────────────────────────────────────────────────┘
          │
          ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │ 5. SERVE            serve_content(): Content-Type, Last-Modified, │
    │                     conditional GET, Range, HEAD                  │
    └───────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE
=============================================================================

    from spaserve import SPAHandler, DirectoryAssets

    spa = SPAHandler(DirectoryAssets("/opt/myspa/dist"), "index.html")
    response = spa(request)

    # Inject runtime configuration into the page
    def add_config(request, html):
        return html.replace("</head>", CONFIG_SCRIPT + "</head>", 1)

    spa = SPAHandler(assets, "index.html", index_rewriter=add_config)

=============================================================================
"""

import dataclasses
import logging
from typing import Callable, Optional

from ..assets import AssetFS
from ..errors import is_not_found, normalized_http_error
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..paths import clean_path
from ..proxy import FORWARDED_PREFIX_HEADER, FORWARDED_URI_HEADER, ProxyContext
from ..rewrite import rewrite_base_href
from .static import StaticFileHandler, serve_content


logger = logging.getLogger(__name__)


IndexRewriter = Callable[[HTTPRequest, str], str]
"""Hook receiving the request and the base-rewritten index; its return value is served verbatim."""


VARY_HEADER_VALUE = f"{FORWARDED_PREFIX_HEADER}, {FORWARDED_URI_HEADER}"


class SPAHandler:
    """
    Request handler for a Single Page Application.

    Args:
        assets: The asset hierarchy holding the bundle.
        index: Path of the index document inside assets. Normalized
               against the root, so "index.html", "/index.html" and
               "../index.html" all name the same file.
        index_rewriter: Optional hook applied to the index document
               after the <base href> rewrite.
        cache_max_age: max-age for static assets.

    Configuration is fixed at construction; one handler can serve any
    number of requests from any number of threads.
    """

    def __init__(
        self,
        assets: AssetFS,
        index: str = "index.html",
        index_rewriter: Optional[IndexRewriter] = None,
        cache_max_age: int = 3600,
    ):
        self.assets = assets
        self.index = clean_path("/" + index)[1:]
        self.index_rewriter = index_rewriter
        self.static = StaticFileHandler(assets, cache_max_age=cache_max_age)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Serve a static asset if one matches, else the rewritten index."""
        cleaned = dataclasses.replace(request, path=clean_path("/" + request.path))

        response = self.serve_static_asset(cleaned)
        if response is not None:
            return response

        return self.serve_rewritten_index(cleaned)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)

    # =========================================================================
    # PATH CLASSIFIER
    # =========================================================================

    def serve_static_asset(self, request: HTTPRequest) -> Optional[HTTPResponse]:
        """
        Serve request.path from the asset hierarchy if it names a regular file.

        Expects a cleaned, rooted request path.

        Returns:
            The response if the request was handled (file served, or an
            unexpected asset error reported), None to fall back to the index.
        """
        path = request.path.lstrip("/")
        if not path:
            return None

        try:
            info = self.assets.stat(path)
        except (OSError, ValueError) as e:
            if is_not_found(e):
                return None
            return normalized_http_error(e)

        if not info.is_file:
            logger.debug("Not a regular file, serving index: %s", path)
            return None

        return self.static.handle(request)

    # =========================================================================
    # BASE RESOLVER & REWRITER
    # =========================================================================

    def serve_rewritten_index(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the index document with its <base href> set to the base path
        the request was made under.
        """
        ctx = ProxyContext.from_request(request)
        base = ctx.base_path(request.path).replace("$", "")

        try:
            info, raw = self.assets.read(self.index)
        except (OSError, ValueError) as e:
            logger.warning("Cannot read index document %r: %s", self.index, e)
            return normalized_http_error(e)

        # surrogateescape carries non-UTF-8 bytes through the rewrite unchanged
        document = rewrite_base_href(raw.decode("utf-8", errors="surrogateescape"), base)

        if self.index_rewriter is not None:
            document = self.index_rewriter(request, document)

        response = serve_content(
            request,
            name=info.name,
            modified=info.mtime,
            content=document.encode("utf-8", errors="surrogateescape"),
        )
        response.set_header("Vary", VARY_HEADER_VALUE)
        return response
