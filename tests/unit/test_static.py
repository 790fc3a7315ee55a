"""
Unit tests for static content serving: ranges, conditional requests,
and the static file handler.
"""

from datetime import datetime, timedelta, timezone

import pytest

from spaserve.assets import MemoryAssets
from spaserve.handlers.static import (
    ByteRange,
    RangeNotSatisfiable,
    StaticFileHandler,
    etag_matches,
    parse_range,
    serve_content,
)
from spaserve.http import HTTPStatus, format_http_date


MODIFIED = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
CONTENT = b"0123456789"
ETAG = '"1767268800-10"'


def serve(build_request, method="GET", headers=None, etag=ETAG, content=CONTENT):
    request = build_request("/digits.txt", method=method, headers=headers)
    return serve_content(request, "digits.txt", MODIFIED, content, etag=etag)


class TestParseRange:
    """Tests for parse_range()."""

    @pytest.mark.parametrize("header,expected", [
        ("bytes=0-3", ByteRange(0, 3)),
        ("bytes=5-", ByteRange(5, 9)),
        ("bytes=-3", ByteRange(7, 9)),
        ("bytes=-20", ByteRange(0, 9)),
        ("bytes=8-100", ByteRange(8, 9)),
        ("bytes = 2-4", ByteRange(2, 4)),
        ("BYTES=0-0", ByteRange(0, 0)),
    ])
    def test_satisfiable(self, header, expected):
        assert parse_range(header, 10) == expected

    @pytest.mark.parametrize("header", [
        "bytes=0-1,5-6",
        "items=0-1",
        "bytes=",
        "bytes=abc",
        "bytes=5-2",
        "bytes=-",
        "bytes=1-x",
    ])
    def test_ignored(self, header):
        assert parse_range(header, 10) is None

    @pytest.mark.parametrize("header", ["bytes=10-", "bytes=50-60", "bytes=-0"])
    def test_not_satisfiable(self, header):
        with pytest.raises(RangeNotSatisfiable):
            parse_range(header, 10)

    def test_byte_range_helpers(self):
        byte_range = ByteRange(0, 99)
        assert byte_range.length == 100
        assert byte_range.content_range(5120) == "bytes 0-99/5120"


class TestEtagMatches:
    """Tests for If-None-Match comparison."""

    @pytest.mark.parametrize("header,etag,expected", [
        ('"a"', '"a"', True),
        ('"a", "b"', '"b"', True),
        ('W/"a"', '"a"', True),
        ('"a"', 'W/"a"', True),
        ("*", '"x"', True),
        ('"a"', '"b"', False),
        ('"a"', None, False),
        ("*", None, False),
    ])
    def test_matching(self, header, etag, expected):
        assert etag_matches(header, etag) is expected


class TestServeContent:
    """Tests for serve_content()."""

    def test_full_response(self, build_request):
        response = serve(build_request)

        assert response.status == HTTPStatus.OK
        assert response.body == CONTENT
        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.headers["Content-Length"] == "10"
        assert response.headers["Last-Modified"] == "Thu, 01 Jan 2026 12:00:00 GMT"
        assert response.headers["ETag"] == ETAG
        assert response.headers["Accept-Ranges"] == "bytes"

    def test_head_has_headers_but_no_body(self, build_request):
        response = serve(build_request, method="HEAD")

        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert response.headers["Content-Length"] == "10"
        assert b"Content-Length: 10\r\n" in response.to_bytes()

    def test_sub_second_mtime_is_truncated(self, build_request):
        request = build_request("/digits.txt", headers={
            "If-Modified-Since": format_http_date(MODIFIED),
        })
        modified = MODIFIED + timedelta(microseconds=500000)

        response = serve_content(request, "digits.txt", modified, CONTENT)

        assert response.status == HTTPStatus.NOT_MODIFIED

    # ─────────────────────────────────────────────────────────────────────
    # CONDITIONAL REQUESTS
    # ─────────────────────────────────────────────────────────────────────

    def test_if_none_match_hit(self, build_request):
        response = serve(build_request, headers={"If-None-Match": ETAG})

        assert response.status == HTTPStatus.NOT_MODIFIED
        assert response.body == b""
        assert response.headers["ETag"] == ETAG
        assert "Last-Modified" not in response.headers
        assert b"Content-Length" not in response.to_bytes()

    def test_if_none_match_miss(self, build_request):
        response = serve(build_request, headers={"If-None-Match": '"stale"'})

        assert response.status == HTTPStatus.OK
        assert response.body == CONTENT

    def test_if_none_match_on_unsafe_method(self, build_request):
        response = serve(build_request, method="POST", headers={"If-None-Match": "*"})

        assert response.status == HTTPStatus.PRECONDITION_FAILED

    def test_if_modified_since_not_modified(self, build_request):
        response = serve(build_request, etag=None, headers={
            "If-Modified-Since": "Thu, 01 Jan 2026 12:00:00 GMT",
        })

        assert response.status == HTTPStatus.NOT_MODIFIED
        assert response.headers["Last-Modified"] == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_if_modified_since_older(self, build_request):
        response = serve(build_request, headers={
            "If-Modified-Since": "Wed, 31 Dec 2025 12:00:00 GMT",
        })

        assert response.status == HTTPStatus.OK

    def test_if_modified_since_ignored_with_if_none_match(self, build_request):
        response = serve(build_request, headers={
            "If-None-Match": '"stale"',
            "If-Modified-Since": "Thu, 01 Jan 2026 12:00:00 GMT",
        })

        assert response.status == HTTPStatus.OK

    def test_garbled_date_is_ignored(self, build_request):
        response = serve(build_request, headers={"If-Modified-Since": "yesterday-ish"})

        assert response.status == HTTPStatus.OK

    def test_if_unmodified_since_failed(self, build_request):
        response = serve(build_request, headers={
            "If-Unmodified-Since": "Wed, 31 Dec 2025 12:00:00 GMT",
        })

        assert response.status == HTTPStatus.PRECONDITION_FAILED

    def test_if_unmodified_since_passed(self, build_request):
        response = serve(build_request, headers={
            "If-Unmodified-Since": "Thu, 01 Jan 2026 12:00:00 GMT",
        })

        assert response.status == HTTPStatus.OK

    # ─────────────────────────────────────────────────────────────────────
    # RANGES
    # ─────────────────────────────────────────────────────────────────────

    def test_range(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=2-5"})

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.body == b"2345"
        assert response.headers["Content-Range"] == "bytes 2-5/10"
        assert response.headers["Content-Length"] == "4"

    def test_suffix_range(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=-3"})

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.body == b"789"

    def test_range_past_end(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=10-"})

        assert response.status == HTTPStatus.RANGE_NOT_SATISFIABLE
        assert response.headers["Content-Range"] == "bytes */10"
        assert response.body == b""

    def test_multiple_ranges_get_full_content(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=0-1,4-5"})

        assert response.status == HTTPStatus.OK
        assert response.body == CONTENT

    def test_range_on_empty_content_is_ignored(self, build_request):
        response = serve(build_request, content=b"", headers={"Range": "bytes=0-"})

        assert response.status == HTTPStatus.OK
        assert response.body == b""

    def test_if_range_matching_etag(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=0-0", "If-Range": ETAG})

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.body == b"0"

    def test_if_range_stale_etag(self, build_request):
        response = serve(build_request, headers={"Range": "bytes=0-0", "If-Range": '"old"'})

        assert response.status == HTTPStatus.OK
        assert response.body == CONTENT

    def test_if_range_date(self, build_request):
        headers = {"Range": "bytes=0-0", "If-Range": "Thu, 01 Jan 2026 12:00:00 GMT"}
        assert serve(build_request, headers=headers).status == HTTPStatus.PARTIAL_CONTENT

        headers["If-Range"] = "Wed, 31 Dec 2025 12:00:00 GMT"
        assert serve(build_request, headers=headers).status == HTTPStatus.OK


class TestStaticFileHandler:
    """Tests for StaticFileHandler."""

    @pytest.fixture
    def handler(self, memory_assets):
        return StaticFileHandler(memory_assets, cache_max_age=600)

    def test_serves_file(self, handler, build_request):
        response = handler(build_request("/static/js/some.js"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"CANARY JS"
        assert response.headers["Content-Type"] == "text/javascript; charset=utf-8"
        assert response.headers["Cache-Control"] == "public, max-age=600"
        assert response.headers["ETag"] == '"1767268800-9"'

    def test_binary_file(self, handler, build_request, fixture_dir):
        response = handler(build_request("/icon.png"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "image/png"
        assert response.body == (fixture_dir / "icon.png").read_bytes()

    def test_path_is_cleaned(self, handler, build_request):
        response = handler(build_request("/../static/./js//some.js"))

        assert response.body == b"CANARY JS"

    @pytest.mark.parametrize("path", ["/", "/static", "/missing.js"])
    def test_non_files_are_not_found(self, handler, build_request, path):
        response = handler(build_request(path))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"404 page not found"

    def test_etag_round_trip(self, handler, build_request):
        first = handler(build_request("/static/js/some.js"))
        second = handler(build_request("/static/js/some.js", headers={
            "If-None-Match": first.headers["ETag"],
        }))

        assert second.status == HTTPStatus.NOT_MODIFIED

    def test_on_disk_assets(self, dir_assets, build_request):
        response = StaticFileHandler(dir_assets).handle(build_request("/static/js/some.js"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"CANARY JS"

    def test_empty_file(self, build_request):
        handler = StaticFileHandler(MemoryAssets({"empty.txt": b""}, mtime=MODIFIED))
        response = handler(build_request("/empty.txt", headers={"Range": "bytes=0-"}))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Length"] == "0"
