r"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All settings for running spaserve as a standalone server, in one
dataclass, loadable from environment variables and validated at startup.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SPASERVE_ROOT=/opt/myspa/dist \                                    │
    │  SPASERVE_PORT=3000 \                                               │
    │  SPASERVE_LOG_FORMAT=json \                                         │
    │      python -m spaserve --from-env                                  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class SPAConfig:
    """
    Configuration for the SPA server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    HTTP        keep_alive, keep_alive_timeout, max_request_size
    THREADING   min_workers, max_workers, queue_size
    SPA         root_dir, index, cache_max_age
    LOGGING     log_level, log_format
    IDENTITY    server_name

    =========================================================================
    BEHIND A REVERSE PROXY
    =========================================================================

        SPAConfig(
            host="0.0.0.0",          # reachable from the proxy container
            port=8080,
            root_dir="/srv/app",
            log_format="json",       # for the log shipper
        )

    No proxy-specific settings are needed: the base path comes from the
    X-Forwarded-Prefix / X-Forwarded-Uri headers of each request.

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers, production)
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 8192
    """Size of the receive buffer in bytes."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds.
    None = blocking (a stalled client would pin a worker forever)
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Allow multiple requests on the same TCP connection."""

    keep_alive_timeout: float = 5.0
    """Idle seconds before a keep-alive connection is closed."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """
    Maximum allowed request size in bytes.
    An SPA server only answers reads, so requests are small.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads created at startup."""

    max_workers: int = 16
    """Upper bound on worker threads."""

    queue_size: int = 1000
    """
    Connections allowed to wait for a worker.
    When full, new connections get 503 Service Unavailable.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SPA SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory holding the built SPA bundle."""

    index: str = "index.html"
    """
    Path of the index document, relative to root_dir.
    Served for every request that does not name a real file.
    """

    cache_max_age: int = 3600
    """Cache-Control max-age (seconds) for static assets."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-like) or 'json' (one object per line).
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "spaserve/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "SPAConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SPASERVE_HOST            Bind address (default: 127.0.0.1)
        SPASERVE_PORT            Port (default: 8080)
        SPASERVE_WORKERS         Max worker threads (default: 16)
        SPASERVE_TIMEOUT         Socket timeout in seconds (default: 30)
        SPASERVE_ROOT            SPA bundle directory (default: .)
        SPASERVE_INDEX           Index document (default: index.html)
        SPASERVE_CACHE_MAX_AGE   Static asset max-age (default: 3600)
        SPASERVE_LOG_LEVEL       Logging level (default: INFO)
        SPASERVE_LOG_FORMAT      text or json (default: text)

        =====================================================================
        """
        max_workers = int(os.getenv("SPASERVE_WORKERS", "16"))

        return cls(
            host=os.getenv("SPASERVE_HOST", "127.0.0.1"),
            port=int(os.getenv("SPASERVE_PORT", "8080")),
            min_workers=min(cls.min_workers, max_workers),
            max_workers=max_workers,
            timeout=float(os.getenv("SPASERVE_TIMEOUT", "30")),
            root_dir=os.getenv("SPASERVE_ROOT", "."),
            index=os.getenv("SPASERVE_INDEX", "index.html"),
            cache_max_age=int(os.getenv("SPASERVE_CACHE_MAX_AGE", "3600")),
            log_level=os.getenv("SPASERVE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("SPASERVE_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: on the first invalid setting.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.cache_max_age < 0:
            raise ValueError("cache_max_age must be >= 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. Must be one of {LOG_FORMATS}."
            )

        if not self.index.strip("/"):
            raise ValueError("index must name a file")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Environment variables for containers (12-factor)
# 3. Validation at startup (fail-fast)
#
# root_dir is only checked for existence when the server builds its
# DirectoryAssets; validate() stays free of file system access.
# =============================================================================
