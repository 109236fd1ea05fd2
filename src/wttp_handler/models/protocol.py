"""WTTP wire structures exchanged with the chain adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

WTTP_VERSION = "WTTP/3.0"

ZERO_HASH = "0x" + "00" * 32

# Fixed-width fields arrive as raw bytes, 0x-hex strings or plain text
FixedWidth = Union[bytes, str]


class Method(IntEnum):
    """Numeric method codes carried in a protocol request line."""

    HEAD = 0
    GET = 1
    POST = 2
    PUT = 3
    PATCH = 4
    DELETE = 5
    OPTIONS = 6
    LOCATE = 7
    DEFINE = 8


# Bit order of the method bitmask in a resource's header info (bit 0 = HEAD)
ALLOW_ORDER: tuple[str, ...] = (
    "HEAD",
    "GET",
    "PUT",
    "DELETE",
    "PATCH",
    "OPTIONS",
    "LOCATE",
    "DEFINE",
)


def methods_bitmask(*names: str) -> int:
    """Build a method bitmask from method names."""
    mask = 0
    for name in names:
        mask |= 1 << ALLOW_ORDER.index(name.upper())
    return mask


def hash_to_str(value: Union[bytes, str, None]) -> str:
    """Return the 0x-prefixed string form of a hash value."""
    if value is None:
        return ZERO_HASH
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def is_zero_hash(value: Union[bytes, str, None]) -> bool:
    """Check whether a hash value is empty or the all-zero sentinel."""
    text = hash_to_str(value).lower()
    if text.startswith("0x"):
        text = text[2:]
    return not text.strip("0")


@dataclass(frozen=True)
class ProtocolRequest:
    """
    Request line and conditional fields for a HEAD or GET call.

    Attributes:
        path: Resource path on the content host
        method_code: Numeric method code (see Method)
        if_modified_since: Epoch seconds, 0 when unconditional
        if_none_match: Content tag, ZERO_HASH when unconditional
        range_start: First byte requested, 0 for whole resource
        range_end: Last byte requested, 0 for whole resource
    """

    path: str
    method_code: int = Method.HEAD
    if_modified_since: int = 0
    if_none_match: str = ZERO_HASH
    range_start: int = 0
    range_end: int = 0
    protocol_version: str = WTTP_VERSION


@dataclass(frozen=True)
class CacheControl:
    max_age: int = 0
    no_store: bool = False
    no_cache: bool = False
    immutable: bool = False
    public: bool = False
    must_revalidate: bool = False
    stale_while_revalidate: int = 0
    stale_if_error: int = 0


@dataclass(frozen=True)
class Redirect:
    code: int = 0
    location: str = ""


@dataclass(frozen=True)
class ResourceMetadata:
    """Metadata block of a resource; text fields are fixed-width on the wire."""

    mime_type: FixedWidth = ""
    charset: FixedWidth = ""
    encoding: FixedWidth = ""
    language: FixedWidth = ""
    size: int = 0
    version: int = 0
    last_modified: int = 0


@dataclass(frozen=True)
class ResponseHead:
    """
    Immutable HEAD response returned by a ChainAdapter.

    Attributes:
        status_code: Protocol status; 0 means the call produced no status
        methods: Bitmask of methods the resource supports (see ALLOW_ORDER)
        cache: Cache directives
        redirect: Redirect code and location
        metadata: Resource metadata block
        etag: Content tag
    """

    status_code: int
    methods: int = 0
    cache: CacheControl = field(default_factory=CacheControl)
    redirect: Redirect = field(default_factory=Redirect)
    metadata: ResourceMetadata = field(default_factory=ResourceMetadata)
    etag: Union[bytes, str] = ZERO_HASH


@dataclass(frozen=True)
class GetResult:
    """GET response: the head plus the (possibly partial) content payload."""

    head: ResponseHead
    data: Union[bytes, str, None] = None
    range_start: int = 0
    range_end: int = 0
