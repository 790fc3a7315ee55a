"""
Unit tests for error normalization.
"""

import errno
import logging

import pytest

from spaserve.errors import normalized_http_error, error_response, is_not_found
from spaserve.http import HTTPStatus


class TestNormalizedHttpError:
    """Tests for mapping asset errors to sanitized responses."""

    @pytest.mark.parametrize("err,status,body", [
        (FileNotFoundError(errno.ENOENT, "No such file", "/srv/secret/app.js"),
         HTTPStatus.NOT_FOUND, b"404 page not found"),
        (NotADirectoryError(errno.ENOTDIR, "Not a directory", "index.html/x"),
         HTTPStatus.NOT_FOUND, b"404 page not found"),
        (PermissionError(errno.EACCES, "Permission denied", "/srv/secret"),
         HTTPStatus.FORBIDDEN, b"403 Forbidden"),
        (OSError(errno.EIO, "I/O error"),
         HTTPStatus.INTERNAL_SERVER_ERROR, b"500 Internal Server Error"),
        (RuntimeError("foobar"),
         HTTPStatus.INTERNAL_SERVER_ERROR, b"500 Internal Server Error"),
    ])
    def test_mapping(self, err, status, body):
        response = normalized_http_error(err)

        assert response.status == status
        assert response.body == body

    def test_plain_text_headers(self):
        response = normalized_http_error(FileNotFoundError())

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_details_never_reach_client(self):
        err = PermissionError(errno.EACCES, "Permission denied", "/srv/secret/key.pem")
        response = normalized_http_error(err)

        assert b"/srv/secret" not in response.to_bytes()
        assert b"Permission denied" not in response.to_bytes()

    def test_real_error_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="spaserve.errors"):
            normalized_http_error(OSError(errno.EIO, "disk on fire"))

        assert "disk on fire" in caplog.text


class TestHelpers:
    """Tests for the error helpers."""

    def test_is_not_found(self):
        assert is_not_found(FileNotFoundError())
        assert is_not_found(NotADirectoryError())
        assert not is_not_found(PermissionError())
        assert not is_not_found(ValueError())

    def test_error_response(self):
        response = error_response(HTTPStatus.SERVICE_UNAVAILABLE, "503 Service Unavailable")

        assert response.status == 503
        assert response.body == b"503 Service Unavailable"
        assert "no-store" in response.headers["Cache-Control"]
