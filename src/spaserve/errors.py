"""
=============================================================================
ERROR NORMALIZATION
=============================================================================

Asset errors must never leak file system details (absolute paths, errno
text, exception messages) to the client. Every error is collapsed into
one of three fixed, plain-text responses:

    ┌──────────────────────────────────┬────────┬───────────────────────────┐
    │ Error                            │ Status │ Body                      │
    ├──────────────────────────────────┼────────┼───────────────────────────┤
    │ FileNotFoundError                │  404   │ 404 page not found        │
    │ NotADirectoryError               │  404   │ 404 page not found        │
    │ PermissionError                  │  403   │ 403 Forbidden             │
    │ anything else                    │  500   │ 500 Internal Server Error │
    └──────────────────────────────────┴────────┴───────────────────────────┘

The real error is logged on the "spaserve.errors" logger.

=============================================================================
"""

import logging

from .http.response import HTTPResponse, ResponseBuilder
from .http.status_codes import HTTPStatus


logger = logging.getLogger("spaserve.errors")


NOT_FOUND_BODY = "404 page not found"
FORBIDDEN_BODY = "403 Forbidden"
INTERNAL_ERROR_BODY = "500 Internal Server Error"


def is_not_found(err: BaseException) -> bool:
    """Check whether an error means "the asset does not exist"."""
    return isinstance(err, (FileNotFoundError, NotADirectoryError))


def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """
    Build a plain-text error response.

    Also used by the server for parse errors and overload responses.
    """
    return (
        ResponseBuilder()
        .status(status)
        .text(message)
        .header("X-Content-Type-Options", "nosniff")
        .no_cache()
        .build()
    )


def normalized_http_error(err: BaseException) -> HTTPResponse:
    """
    Map an asset error to a sanitized HTTP error response.

    Example:
        try:
            info = assets.stat(path)
        except OSError as e:
            return normalized_http_error(e)
    """
    if is_not_found(err):
        logger.debug("Asset not found: %s", err)
        return error_response(HTTPStatus.NOT_FOUND, NOT_FOUND_BODY)

    if isinstance(err, PermissionError):
        logger.warning("Asset access denied: %s", err)
        return error_response(HTTPStatus.FORBIDDEN, FORBIDDEN_BODY)

    logger.error("Asset error: %r", err, exc_info=err)
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_ERROR_BODY)
