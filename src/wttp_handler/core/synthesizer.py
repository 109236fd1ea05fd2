"""Synthesis of HTTP-shaped responses from WTTP response structures."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from email.utils import formatdate
from http import HTTPStatus
from typing import Any, Optional, Union

from multidict import CIMultiDict

from ..models.protocol import (
    ALLOW_ORDER,
    WTTP_VERSION,
    CacheControl,
    FixedWidth,
    ResponseHead,
    hash_to_str,
    is_zero_hash,
)
from .urls import resolve_reference


@dataclass(frozen=True)
class WttpResponse:
    """
    Immutable HTTP-shaped response returned by fetch.

    Attributes:
        status: HTTP status code
        headers: Response headers (ordered, case-insensitive)
        body: Raw body bytes, None when the response has no body
        url: URL the response was produced for
        redirected: True if one or more redirects were followed
    """

    status: int
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: Optional[bytes] = None
    url: str = ""
    redirected: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDict):
            object.__setattr__(self, "headers", CIMultiDict(self.headers))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def text(self, encoding: Optional[str] = None) -> str:
        """Decode the body using the given or declared charset, falling back to UTF-8."""
        if not self.body:
            return ""
        if encoding is None:
            for part in self.headers.get("Content-Type", "").split(";")[1:]:
                part = part.strip()
                if part.lower().startswith("charset="):
                    encoding = part.split("=", 1)[1].strip().strip("\"'")
                    break
        if encoding:
            try:
                return self.body.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                pass
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.text())


def normalize_status(code: int) -> int:
    """Map protocol statuses that are not valid HTTP statuses (notably 0) to 500."""
    code = int(code)
    return code if 100 <= code <= 599 else 500


def decode_fixed(value: Optional[FixedWidth]) -> str:
    """Trim a fixed-width text field (raw bytes, 0x-hex or text) to its content."""
    if value is None:
        return ""
    if isinstance(value, str):
        if not value.startswith("0x"):
            return value.strip("\x00").strip()
        try:
            value = bytes.fromhex(value[2:])
        except ValueError:
            return value.strip("\x00").strip()
    return bytes(value).strip(b"\x00").decode("utf-8", errors="replace").strip()


def decode_body(data: Union[bytes, str, None]) -> Optional[bytes]:
    """Return a content payload as bytes; 0x-hex strings are decoded."""
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if data.startswith("0x"):
        try:
            return bytes.fromhex(data[2:])
        except ValueError:
            pass
    return data.encode("utf-8")


def http_date(timestamp: int) -> str:
    """Format epoch seconds as an HTTP-date."""
    return formatdate(timestamp, usegmt=True)


def cache_control(cache: CacheControl) -> Optional[str]:
    """Assemble a Cache-Control value, or None if no directive applies."""
    directives: list[str] = []
    if cache.max_age > 0:
        directives.append(f"max-age={cache.max_age}")
    if cache.no_store:
        directives.append("no-store")
    if cache.no_cache:
        directives.append("no-cache")
    if cache.immutable:
        directives.append("immutable")
    if cache.public:
        directives.append("public")
    if cache.must_revalidate:
        directives.append("must-revalidate")
    if cache.stale_while_revalidate > 0:
        directives.append(f"stale-while-revalidate={cache.stale_while_revalidate}")
    if cache.stale_if_error > 0:
        directives.append(f"stale-if-error={cache.stale_if_error}")
    return ", ".join(directives) if directives else None


def allow_header(methods: int) -> Optional[str]:
    """Decode a method bitmask into an Allow value, or None if the bitmask is empty."""
    allowed = [name for bit, name in enumerate(ALLOW_ORDER) if methods & (1 << bit)]
    return ", ".join(allowed) if allowed else None


def synthesize(
    head: ResponseHead,
    data: Union[bytes, str, None] = None,
    *,
    request_url: str,
    host: Optional[str] = None,
    byte_range: Optional[tuple[int, int]] = None,
) -> WttpResponse:
    """
    Build an HTTP-shaped response from a WTTP response head.

    Args:
        head: Response head from the chain adapter
        data: GET payload; None for HEAD-shaped responses
        request_url: URL the request was made for (base for Location)
        host: Value for the WTTP-Host header (the host as requested)
        byte_range: Served byte range, reported as Content-Range on 206

    Returns:
        WttpResponse; absent fields are omitted from the headers
    """
    status = normalize_status(head.status_code)
    metadata = head.metadata
    headers: CIMultiDict = CIMultiDict()

    mime_type = decode_fixed(metadata.mime_type)
    if mime_type:
        charset = decode_fixed(metadata.charset)
        headers["Content-Type"] = f"{mime_type}; charset={charset}" if charset else mime_type

    encoding = decode_fixed(metadata.encoding)
    if encoding:
        headers["Content-Encoding"] = encoding

    language = decode_fixed(metadata.language)
    if language:
        headers["Content-Language"] = language

    if metadata.size:
        headers["Content-Length"] = str(metadata.size)

    if not is_zero_hash(head.etag):
        headers["ETag"] = hash_to_str(head.etag)

    if metadata.last_modified:
        headers["Last-Modified"] = http_date(metadata.last_modified)

    directives = cache_control(head.cache)
    if directives:
        headers["Cache-Control"] = directives

    allow = allow_header(head.methods)
    if allow:
        headers["Allow"] = allow

    location = head.redirect.location.strip() if head.redirect.location else ""
    if location:
        headers["Location"] = resolve_reference(request_url, location)

    if status == 206 and byte_range is not None:
        start, end = byte_range
        total = str(metadata.size) if metadata.size else "*"
        headers["Content-Range"] = f"bytes {start}-{end}/{total}"

    headers["WTTP-Version"] = WTTP_VERSION
    if host:
        headers["WTTP-Host"] = host

    body = None if status == 304 else decode_body(data)
    return WttpResponse(status=status, headers=headers, body=body, url=request_url)
