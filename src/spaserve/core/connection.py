"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted TCP socket: buffered request reading, response
writing, keep-alive bookkeeping and a graceful close.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONNECTION LIFECYCLE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► PROCESSING ──► WRITING ──┬──► CLOSING ──► CLOSED
    │              ▲                                  │                    │
    │              └────────── KEEP_ALIVE ◄───────────┘                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

TCP delivers a byte stream, not messages. A single recv() may return
half a request or one and a half requests, so the connection keeps a
buffer and cuts exactly one request off it at a time:

    buffer:  GET / HTTP/1.1\\r\\n...\\r\\n\\r\\nGET /app.js HTTP/1.1\\r\\n...
             └──────── request 1 ────────┘└──── start of request 2 ────

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and cleanup."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Usage:
        with Connection(client_socket, address) as conn:
            data = conn.read_request()
            conn.send_response(response.to_bytes())
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0          # First request
    keep_alive_timeout: float = 5.0          # Every request after that
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Returns:
            The raw request bytes, or None if the client closed the
            connection (or an idle keep-alive connection timed out).

        Raises:
            HTTPParseError: 413 when the request exceeds max_request_size.
            TimeoutError: when the first request is not received in time.
        """
        self.state = ConnectionState.READING
        self.last_activity = time.time()

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            # Headers first
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                self._check_size()

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            # Then exactly Content-Length body bytes
            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break
                self._buffer += chunk
                self._check_size()

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            self.last_activity = time.time()
            self.state = ConnectionState.PROCESSING
            return request_data

        except socket.timeout:
            if self.requests_handled > 0:
                logger.debug("[%s] Keep-alive timeout", self.id)
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _check_size(self) -> None:
        if len(self._buffer) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(self._buffer)} bytes",
                status_code=413,
            )

    def _recv(self) -> bytes:
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    # The parser reports the bad header properly
                    return 0
        return 0

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Returns:
            False if the client went away mid-send.
        """
        self.state = ConnectionState.WRITING
        self.last_activity = time.time()

        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            logger.warning("[%s] Send failed: %s", self.id, e)
            return False

    def set_keep_alive(self):
        self.state = ConnectionState.KEEP_ALIVE

    def close(self):
        """
        Close the connection gracefully.

        SHUT_WR first, then drain briefly, then close: closing a socket
        with unread data makes the kernel send RST, which can destroy the
        response the client has not read yet.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            "[%s] Connection closed after %d requests (%.1fs)",
            self.id, self.requests_handled, self.age,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
