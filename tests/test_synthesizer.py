"""Tests for HTTP response synthesis."""

import pytest
from support import ETAG, HOST, html_head
from wttp_handler.core.synthesizer import (
    WttpResponse,
    allow_header,
    cache_control,
    decode_fixed,
    normalize_status,
    synthesize,
)
from wttp_handler.models.protocol import (
    WTTP_VERSION,
    ZERO_HASH,
    CacheControl,
    Redirect,
    ResourceMetadata,
    ResponseHead,
    methods_bitmask,
)

URL = f"wttp://{HOST}/docs/page.html"


class TestHelpers:
    """Tests for the header helpers."""

    @pytest.mark.parametrize("code,expected", [(0, 500), (99, 500), (600, 500), (200, 200), (404, 404)])
    def test_normalize_status(self, code, expected):
        assert normalize_status(code) == expected

    def test_decode_fixed_bytes(self):
        assert decode_fixed(b"text/html" + b"\x00" * 23) == "text/html"

    def test_decode_fixed_hex(self):
        assert decode_fixed("0x" + b"utf-8".hex() + "00" * 27) == "utf-8"

    def test_decode_fixed_text(self):
        assert decode_fixed("en-US") == "en-US"
        assert decode_fixed(None) == ""

    def test_cache_control(self):
        assert cache_control(CacheControl(max_age=3600, public=True)) == "max-age=3600, public"
        assert cache_control(CacheControl()) is None

    def test_cache_control_all(self):
        cache = CacheControl(
            max_age=60,
            no_store=True,
            no_cache=True,
            immutable=True,
            public=True,
            must_revalidate=True,
            stale_while_revalidate=30,
            stale_if_error=10,
        )
        assert cache_control(cache) == (
            "max-age=60, no-store, no-cache, immutable, public, must-revalidate, "
            "stale-while-revalidate=30, stale-if-error=10"
        )

    def test_allow_header(self):
        """Test that the bitmask decodes in protocol bit order."""
        assert allow_header(0b111) == "HEAD, GET, PUT"
        assert allow_header(methods_bitmask("OPTIONS", "HEAD")) == "HEAD, OPTIONS"
        assert allow_header(0) is None


class TestSynthesize:
    """Tests for synthesize."""

    def test_full_headers(self):
        """Test the header set of a typical HTML resource."""
        head = html_head(last_modified=100)
        response = synthesize(head, b"<html></html>", request_url=URL, host="site.eth")

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.headers["Content-Length"] == "13"
        assert response.headers["ETag"] == ETAG
        assert response.headers["Last-Modified"] == "Thu, 01 Jan 1970 00:01:40 GMT"
        assert response.headers["Cache-Control"] == "max-age=3600, public"
        assert response.headers["Allow"] == "HEAD, GET"
        assert response.headers["WTTP-Version"] == WTTP_VERSION
        assert response.headers["WTTP-Host"] == "site.eth"
        assert response.body == b"<html></html>"
        assert response.url == URL

    def test_headers_case_insensitive(self):
        response = synthesize(html_head(), request_url=URL)
        assert response.headers["content-type"] == "text/html; charset=utf-8"

    def test_absent_fields_omitted(self):
        """Test that empty metadata produces no content headers."""
        response = synthesize(ResponseHead(status_code=404), request_url=URL)
        for name in ("Content-Type", "Content-Length", "ETag", "Last-Modified", "Cache-Control", "Allow", "Location"):
            assert name not in response.headers
        assert response.body is None

    def test_zero_etag_omitted(self):
        head = ResponseHead(status_code=200, etag=ZERO_HASH)
        assert "ETag" not in synthesize(head, request_url=URL).headers

    def test_bytes_etag(self):
        head = ResponseHead(status_code=200, etag=bytes.fromhex("ab" * 32))
        assert synthesize(head, request_url=URL).headers["ETag"] == ETAG

    def test_content_type_without_charset(self):
        head = ResponseHead(status_code=200, metadata=ResourceMetadata(mime_type="image/png"))
        assert synthesize(head, request_url=URL).headers["Content-Type"] == "image/png"

    def test_encoding_and_language(self):
        head = ResponseHead(
            status_code=200,
            metadata=ResourceMetadata(mime_type=b"text/plain", encoding=b"gzip", language=b"en-US"),
        )
        response = synthesize(head, request_url=URL)
        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Language"] == "en-US"

    def test_relative_location_resolved(self):
        """Test that Location is made absolute against the request URL."""
        head = ResponseHead(status_code=301, redirect=Redirect(code=301, location="../other.html"))
        response = synthesize(head, request_url=URL)
        assert response.headers["Location"] == f"wttp://{HOST}/other.html"

    def test_not_modified_has_no_body(self):
        response = synthesize(ResponseHead(status_code=304, etag=ETAG), b"stale", request_url=URL)
        assert response.status == 304
        assert response.body is None
        assert response.headers["ETag"] == ETAG

    def test_zero_status(self):
        assert synthesize(ResponseHead(status_code=0), request_url=URL).status == 500

    def test_hex_body(self):
        response = synthesize(ResponseHead(status_code=200), "0x" + b"hi".hex(), request_url=URL)
        assert response.body == b"hi"

    def test_partial_content_range(self):
        head = ResponseHead(status_code=206, metadata=ResourceMetadata(size=100))
        response = synthesize(head, b"0123456789", request_url=URL, byte_range=(0, 9))
        assert response.headers["Content-Range"] == "bytes 0-9/100"


class TestWttpResponse:
    """Tests for WttpResponse."""

    def test_dict_headers_converted(self):
        response = WttpResponse(status=200, headers={"Content-Type": "text/plain"})
        assert response.headers["content-type"] == "text/plain"

    def test_text_uses_charset(self):
        response = WttpResponse(
            status=200,
            headers={"Content-Type": "text/plain; charset=latin-1"},
            body="café".encode("latin-1"),
        )
        assert response.text() == "café"

    def test_json(self):
        response = WttpResponse(status=200, body=b'{"a": 1}')
        assert response.json() == {"a": 1}

    def test_ok_and_reason(self):
        assert WttpResponse(status=204).ok
        assert not WttpResponse(status=404).ok
        assert WttpResponse(status=404).reason == "Not Found"
