"""
=============================================================================
CORE NETWORKING
=============================================================================

Transport layer of spaserve, independent of the SPA logic:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ SocketServer   listening socket, accept loop, SIGINT/SIGTERM        │
    │ Connection     one client socket: buffered reads, keep-alive        │
    │ ThreadPool     bounded worker threads, one task per connection      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
