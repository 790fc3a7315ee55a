"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per request on the "spaserve.access" logger.

TEXT (Apache-like):

    10.0.0.7 - - [01/Jan/2026:12:00:00 +0000] "GET /users/42" 200 512 1.84ms

JSON (one object per line, for log shippers):

    {"request_id": "a1b2c3d4", "method": "GET", "path": "/users/42",
     "forwarded_prefix": "/app", "status_code": 200, ...}

Every response also gets an X-Request-ID header carrying the id from the
log line, so a user-visible response can be matched to its log entry.

The logged path is the one the client sent, before the SPA handler
cleans it: "/../etc/passwd" shows up as such in the log.

=============================================================================
"""

import time
import json
import uuid
import logging
from typing import Optional
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..proxy import FORWARDED_PREFIX_HEADER


logger = logging.getLogger("spaserve.access")


@dataclass
class RequestLog:
    """A single access log record."""

    request_id: str
    method: str
    path: str
    query: str
    forwarded_prefix: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Logs every request with its status, size and duration.

    Args:
        log_format: "text" or "json".
        include_request_id: Add the X-Request-ID response header.
        log_level: Level for successful requests; 4xx/5xx always log at
                   WARNING and ERROR respectively.
        skip_paths: Exact paths that are not logged (e.g. "/favicon.ico").
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Request failed: %s %s - %s: %s (%.2fms)",
                request.method, request.path, type(e).__name__, e, duration_ms,
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        if self.include_request_id:
            response.set_header("X-Request-ID", request_id)

        if request.path in self.skip_paths:
            return response

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.query_string,
            forwarded_prefix=request.get_header(FORWARDED_PREFIX_HEADER),
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=self._content_length(response),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            message = json.dumps(log_entry.to_dict())
        else:
            message = log_entry.to_text()

        logger.log(self._level_for(response), message)
        return response

    def _level_for(self, response: HTTPResponse) -> int:
        if response.status.is_server_error:
            return logging.ERROR
        if response.status.is_client_error:
            return logging.WARNING
        return self.log_level

    @staticmethod
    def _content_length(response: HTTPResponse) -> int:
        # HEAD responses advertise a length without carrying a body
        declared = response.get_header("Content-Length")
        if declared is not None and declared.isdigit():
            return int(declared)
        return len(response.body)
