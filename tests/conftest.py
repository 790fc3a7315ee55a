"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spaserve import SPAServer, SPAConfig, DirectoryAssets, MemoryAssets
from spaserve.http import HTTPRequest


FIXTURE_SPA = Path(__file__).parent / "fixtures" / "spa"

INDEX_HTML = (
    '<!doctype html>\n'
    '<html><head><base href="/" /><title>app</title></head>'
    '<body><div id="app"></div></body></html>\n'
)

FIXED_MTIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_request(
    path: str = "/",
    method: str = "GET",
    headers: Optional[dict] = None,
) -> HTTPRequest:
    """Build an HTTPRequest the way the parser would (lowercase header names)."""
    return HTTPRequest(
        method=method,
        path=path,
        headers={name.lower(): value for name, value in (headers or {}).items()},
        client_address=("127.0.0.1", 54321),
    )


@pytest.fixture
def build_request():
    """Factory fixture: build_request("/path", headers={...})."""
    return make_request


@pytest.fixture
def fixture_dir() -> Path:
    """The on-disk SPA bundle under tests/fixtures/spa."""
    return FIXTURE_SPA


@pytest.fixture
def dir_assets(fixture_dir: Path) -> DirectoryAssets:
    return DirectoryAssets(fixture_dir)


@pytest.fixture
def memory_assets() -> MemoryAssets:
    """An in-memory bundle mirroring the on-disk fixture."""
    return MemoryAssets(
        {
            "index.html": INDEX_HTML,
            "static/js/some.js": "CANARY JS",
            "icon.png": (FIXTURE_SPA / "icon.png").read_bytes(),
        },
        mtime=FIXED_MTIME,
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request as sent by a reverse proxy."""
    return (
        b"GET /users/42?tab=profile HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"X-Forwarded-Prefix: /app\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class LiveServer:
    """Runs an SPAServer in a background thread."""

    def __init__(self, server: SPAServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw request bytes, return everything until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def start_server(free_port: int) -> Generator:
    """Factory fixture: start_server(config, middleware=[...], **SPAServer kwargs) → running LiveServer."""
    started = []

    def start(config: Optional[SPAConfig] = None, middleware=(), **server_kwargs) -> LiveServer:
        config = config or SPAConfig()
        config.host = "127.0.0.1"
        config.port = free_port
        config.log_level = "WARNING"

        server = SPAServer(config, **server_kwargs)
        for mw in middleware:
            server.use(mw)

        srv = LiveServer(server, free_port)
        srv.start()
        started.append(srv)
        return srv

    yield start

    for srv in started:
        srv.stop()


@pytest.fixture
def live_server(start_server, fixture_dir: Path) -> LiveServer:
    """An SPA server over the fixture bundle, listening on a free port."""
    return start_server(SPAConfig(
        root_dir=str(fixture_dir),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
    ))
