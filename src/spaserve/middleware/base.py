"""
=============================================================================
MIDDLEWARE PIPELINE
=============================================================================

Middleware wraps the SPA handler to add cross-cutting behaviour
(access logging, extra response headers) without touching it.

    request ──► [ Logging ] ──► [ Custom ] ──► SPAHandler
                     │               │              │
    response ◄───────┴───────────────┴──────────────┘

Each middleware receives the request and a `next` callable, and returns
a response. It may change the request on the way in, the response on
the way out, or answer on its own without calling `next`.

    class SecurityHeaders(Middleware):
        def __call__(self, request, next):
            response = next(request)
            response.set_header("X-Frame-Options", "DENY")
            return response

Middleware added first runs outermost.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """Base class for middleware."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered collection of middleware wrapped around a handler.

        pipeline = MiddlewarePipeline()
        pipeline.use(LoggingMiddleware(), SecurityHeaders())
        handler = pipeline.wrap(spa_handler)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug("Added middleware: %s", middleware.name)
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Build the call chain, innermost (handler) first."""
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        # A factory keeps each closure bound to its own middleware/next pair
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)


class FunctionMiddleware(Middleware):
    """Adapts a plain function(request, next) to the Middleware interface."""

    def __init__(
        self,
        func: Callable[[HTTPRequest, NextHandler], HTTPResponse],
        name: Optional[str] = None
    ):
        self._func = func
        self._name = name or func.__name__

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        return self._func(request, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(
    func: Callable[[HTTPRequest, NextHandler], HTTPResponse]
) -> FunctionMiddleware:
    """
    Decorator turning a function into middleware.

        @function_middleware
        def no_sniff(request, next):
            response = next(request)
            response.set_header("X-Content-Type-Options", "nosniff")
            return response
    """
    return FunctionMiddleware(func)
