"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timedelta, timezone

import pytest

from spaserve.http.response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    parse_http_date,
)
from spaserve.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.RANGE_NOT_SATISFIABLE)
        assert response.status_line == "HTTP/1.1 416 Range Not Satisfiable"

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: spaserve/1.0\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_sets_content_length(self):
        """Test that Content-Length is auto-set."""
        response = HTTPResponse(body=b"hello world")

        assert b"Content-Length: 11\r\n" in response.to_bytes()

    def test_explicit_content_length_wins(self):
        """Test that a HEAD-style response keeps its advertised length."""
        response = HTTPResponse(headers={"Content-Length": "512"}, body=b"")
        result = response.to_bytes()

        assert b"Content-Length: 512\r\n" in result
        assert b"Content-Length: 0" not in result

    def test_not_modified_has_no_content_length(self):
        """Test that 304 responses carry no Content-Length."""
        response = HTTPResponse(status=HTTPStatus.NOT_MODIFIED)

        assert b"Content-Length" not in response.to_bytes()

    def test_server_name(self):
        """Test overriding the Server header value."""
        result = HTTPResponse().to_bytes(server_name="edge/2")

        assert b"Server: edge/2\r\n" in result

    def test_get_header_case_insensitive(self):
        """Test header lookup ignores case."""
        response = HTTPResponse(headers={"Content-Type": "text/html"})

        assert response.get_header("content-type") == "text/html"
        assert response.get_header("X-Missing") is None

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers["X-One"] == "1"
        assert response.headers["X-Two"] == "2"

    def test_set_body_encodes_text(self):
        """Test that str bodies are encoded as UTF-8."""
        response = HTTPResponse().set_body("héllo")

        assert response.body == "héllo".encode("utf-8")


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status code."""
        response = ResponseBuilder().status(HTTPStatus.PARTIAL_CONTENT).build()
        assert response.status == HTTPStatus.PARTIAL_CONTENT

    def test_status_from_int(self):
        """Test that plain ints are converted to HTTPStatus."""
        response = ResponseBuilder().status(404).build()
        assert response.status is HTTPStatus.NOT_FOUND

    def test_html_body(self):
        """Test HTML body."""
        html = "<html><body>Hello</body></html>"
        response = ResponseBuilder().html(html).build()

        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.body == html.encode()

    def test_text_body(self):
        """Test plain text body."""
        text = "404 page not found"
        response = ResponseBuilder().text(text).build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == text.encode()

    def test_last_modified(self):
        """Test Last-Modified formatting."""
        modified = datetime(2026, 1, 1, 12, 0, 0, 999999, tzinfo=timezone.utc)
        response = ResponseBuilder().last_modified(modified).build()

        assert response.headers["Last-Modified"] == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_cache_headers(self):
        """Test cache header setting."""
        response = ResponseBuilder().cache(max_age=3600).build()
        assert response.headers["Cache-Control"] == "public, max-age=3600"

        response = ResponseBuilder().no_cache().build()
        assert "no-store" in response.headers["Cache-Control"]
        assert response.headers["Pragma"] == "no-cache"

    def test_keep_alive(self):
        """Test keep-alive headers."""
        response = ResponseBuilder().keep_alive(timeout=10, max_requests=50).build()

        assert response.headers["Connection"] == "keep-alive"
        assert "timeout=10" in response.headers["Keep-Alive"]
        assert "max=50" in response.headers["Keep-Alive"]

    def test_close_connection(self):
        """Test connection close header."""
        response = ResponseBuilder().close_connection().build()
        assert response.headers["Connection"] == "close"

    def test_method_chaining(self):
        """Test fluent API chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("Vary", "X-Forwarded-Prefix")
            .headers({"X-One": "1"})
            .content_type("image/png")
            .body(b"\x89PNG")
            .build())

        assert response.status == HTTPStatus.OK
        assert response.headers["Vary"] == "X-Forwarded-Prefix"
        assert response.headers["X-One"] == "1"
        assert response.headers["Content-Type"] == "image/png"
        assert response.body == b"\x89PNG"

    def test_to_bytes_uses_server_name(self):
        """Test the builder's one-step serialization."""
        result = ResponseBuilder(server_name="custom/1").text("hi").to_bytes()

        assert b"Server: custom/1\r\n" in result
        assert result.endswith(b"hi")


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        """Test that all statuses have phrases."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.PRECONDITION_FAILED.phrase == "Precondition Failed"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

        for status in HTTPStatus:
            assert status.phrase

    def test_status_categories(self):
        """Test status category helpers."""
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.PARTIAL_CONTENT.is_success
        assert HTTPStatus.NOT_MODIFIED.is_redirect
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.SERVICE_UNAVAILABLE.is_server_error

        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
        assert not HTTPStatus.OK.is_error


class TestHTTPDates:
    """Tests for HTTP date formatting and parsing."""

    def test_format(self):
        """Test HTTP date format."""
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_format_converts_to_utc(self):
        """Test that aware datetimes in other zones are shifted to GMT."""
        dt = datetime(2026, 1, 15, 14, 30, 45, tzinfo=timezone(timedelta(hours=2)))

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    @pytest.mark.parametrize("value", [
        "Thu, 15 Jan 2026 12:30:45 GMT",
        "Thursday, 15-Jan-26 12:30:45 GMT",
        "Thu Jan 15 12:30:45 2026",
    ])
    def test_parse_formats(self, value):
        """Test IMF-fixdate, RFC 850 and asctime forms."""
        expected = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert parse_http_date(value) == expected

    @pytest.mark.parametrize("value", ["", "not a date", "Thu, 99 Foo 2026"])
    def test_parse_invalid(self, value):
        """Test that garbage parses to None."""
        assert parse_http_date(value) is None

    def test_parse_is_aware(self):
        """Test that parsed dates are always timezone-aware."""
        parsed = parse_http_date("Thu, 15 Jan 2026 12:30:45 GMT")

        assert parsed.tzinfo is not None
