"""
=============================================================================
SPA SERVER
=============================================================================

Ties the pieces together into a runnable server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SPAServer                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ──accept──► ThreadPool ──► _process_connection()     │
    │                                              │                       │
    │                              ┌───────────────┘                       │
    │                              ▼                                       │
    │                  read → parse → middleware → SPAHandler → send       │
    │                    ▲                                        │        │
    │                    └──────────── keep-alive ────────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE
=============================================================================

    from spaserve import SPAServer, SPAConfig

    server = SPAServer(SPAConfig(root_dir="./dist", port=3000))
    server.run()                      # blocks until SIGINT/SIGTERM

    # With a custom handler (e.g. an embedded bundle)
    spa = SPAHandler(MemoryAssets(BUNDLE), "index.html")
    SPAServer(config, handler=spa).run()

=============================================================================
"""

import logging
from typing import Optional, Callable

from .assets import DirectoryAssets
from .config import SPAConfig
from .core import SocketServer, Connection, ThreadPool
from .errors import error_response
from .handlers.spa import IndexRewriter, SPAHandler
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest], HTTPResponse]


class SPAServer:
    """
    HTTP server for a Single Page Application.

    Args:
        config: Server configuration (defaults to SPAConfig()).
        handler: Request handler. Defaults to an SPAHandler over
                 DirectoryAssets(config.root_dir).
        index_rewriter: Hook for the default handler's index document.
        access_log: Install LoggingMiddleware (format from config.log_format).

    Raises:
        ValueError: On invalid configuration or a missing root directory.
    """

    def __init__(
        self,
        config: Optional[SPAConfig] = None,
        handler: Optional[Handler] = None,
        index_rewriter: Optional[IndexRewriter] = None,
        access_log: bool = True,
    ):
        self.config = config or SPAConfig()
        self.config.validate()

        if handler is None:
            handler = SPAHandler(
                DirectoryAssets(self.config.root_dir),
                self.config.index,
                index_rewriter=index_rewriter,
                cache_max_age=self.config.cache_max_age,
            )
        self.handler = handler

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            max_queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._middleware = MiddlewarePipeline()
        self._handler: Optional[Handler] = None
        self._running = False

        if access_log:
            self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "SPAServer":
        """Add middleware. Must be called before run()."""
        self._middleware.add(middleware)
        return self

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is shut down.

        Raises:
            OSError: If the address cannot be bound.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._setup_logging()
        self._handler = self._middleware.wrap(self.handler)
        self._thread_pool.start()
        self._running = True

        logger.info(
            "Serving %s on http://%s:%s",
            getattr(self.handler, "assets", self.handler), self.config.host, self.config.port,
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask a running server to stop. Returns immediately."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("spaserve").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop for each new connection."""
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(
                "[%s] Thread pool full (%d/%d workers busy, %d queued), rejecting connection",
                conn.id, self._thread_pool.busy_workers, self._thread_pool.size, self._thread_pool.queued,
            )
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE)
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve requests on one connection until it closes.

            ┌──► read_request()        None → client gone, stop
            │        │
            │    parse()               HTTPParseError → error response, stop
            │        │
            │    handler(request)      exception → 500
            │        │
            │    send_response()
            │        │
            └─── keep-alive?           no → stop
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                    if raw_request is None:
                        break

                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.info("[%s] Bad request: %s", conn.id, e)
                    self._send_error(conn, HTTPStatus(e.status_code))
                    break
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT)
                    break
                except OSError as e:
                    logger.debug("[%s] Read failed: %s", conn.id, e)
                    break

                try:
                    response = self._handler(request)
                except Exception:
                    logger.exception("[%s] Handler error for %s %s", conn.id, request.method, request.path)
                    response = error_response(
                        HTTPStatus.INTERNAL_SERVER_ERROR, "500 Internal Server Error"
                    )

                keep_alive = request.is_keep_alive and self.config.keep_alive
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive",
                        f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                if not conn.send_response(response.to_bytes(self.config.server_name)):
                    break
                if not keep_alive:
                    break

                conn.set_keep_alive()

    def _send_error(self, conn: Connection, status: HTTPStatus):
        response = error_response(status, f"{int(status)} {status.phrase}")
        response.set_header("Connection", "close")
        conn.send_response(response.to_bytes(self.config.server_name))


def create_server(
    root_dir: str,
    index: str = "index.html",
    **config_kwargs,
) -> SPAServer:
    """
    Create an SPAServer for a bundle directory.

        server = create_server("./dist", port=3000)
        server.run()
    """
    return SPAServer(SPAConfig(root_dir=root_dir, index=index, **config_kwargs))
