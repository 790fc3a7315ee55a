"""
=============================================================================
MIDDLEWARE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Incoming Request                                                   │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────┐                                              │
    │   │ LoggingMiddleware │ ──► access log line, X-Request-ID           │
    │   └────────┬─────────┘                                              │
    │            ▼                                                         │
    │   ┌──────────────────┐                                              │
    │   │ your middleware   │ ──► e.g. security headers                   │
    │   └────────┬─────────┘                                              │
    │            ▼                                                         │
    │   ┌──────────────────┐                                              │
    │   │    SPAHandler     │ ──► static asset or rewritten index         │
    │   └──────────────────┘                                              │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .base import (
    Middleware,
    MiddlewarePipeline,
    FunctionMiddleware,
    NextHandler,
    function_middleware,
)
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "FunctionMiddleware",
    "NextHandler",
    "function_middleware",
    "LoggingMiddleware",
    "RequestLog",
]
