"""Mapping of HTTP-style request descriptions onto WTTP protocol requests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from ..errors import RequestError
from ..models.protocol import ZERO_HASH, Method, ProtocolRequest
from .resolver import EndpointDescriptor

logger = logging.getLogger(__name__)


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup on any mapping."""
    if not headers:
        return None
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def method_code(method: str) -> int:
    """
    Map a method name to its protocol method code.

    Raises:
        RequestError: If the method is not part of the protocol
    """
    try:
        return int(Method[method.strip().upper()])
    except KeyError as e:
        raise RequestError(f"Unsupported method: {method}") from e


def parse_if_modified_since(value: Optional[str]) -> int:
    """Parse an If-Modified-Since value (HTTP-date or epoch seconds); 0 if absent or unparsable."""
    if not value:
        return 0
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.debug(f"Ignoring unparsable If-Modified-Since: {value!r}")
        return 0
    # "-0000" zones parse as naive datetimes
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return max(0, int(parsed.timestamp()))


def parse_if_none_match(value: Optional[str]) -> str:
    """Extract the content tag from an If-None-Match value; ZERO_HASH if absent."""
    if not value:
        return ZERO_HASH
    tag = value.split(",", 1)[0].strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"').strip()
    if not tag or tag == "*":
        return ZERO_HASH
    return tag


def parse_range(value: Optional[str]) -> tuple[int, int]:
    """
    Parse a ``start-end`` Range value into byte bounds.

    Absent or non-numeric bounds default to 0, which the protocol reads as
    "whole resource".

    Raises:
        RequestError: If a bound is negative or the range ends before it starts
    """
    if not value:
        return 0, 0

    ranges = value.strip()
    if ranges.lower().startswith("bytes="):
        ranges = ranges[len("bytes=") :]
    # Only the first range of a multi-range request is served
    ranges = ranges.split(",", 1)[0]

    start_str, sep, end_str = ranges.partition("-")
    if not sep:
        return 0, 0

    start = _parse_bound(start_str)
    end = _parse_bound(end_str)
    if start < 0 or end < 0:
        raise RequestError(f"Invalid Range header: {value}")
    if end and end < start:
        raise RequestError(f"Invalid Range header: {value} (end before start)")
    return start, end


def _parse_bound(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def build_request(
    endpoint: EndpointDescriptor,
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
) -> ProtocolRequest:
    """
    Build the protocol request for a call.

    Args:
        endpoint: Resolved endpoint (supplies the path)
        method: HTTP-style method name
        headers: Request headers; conditional and Range headers are mapped

    Returns:
        ProtocolRequest for the call

    Raises:
        RequestError: On an unsupported method or malformed range
    """
    start, end = parse_range(get_header(headers, "Range"))
    return ProtocolRequest(
        path=endpoint.path,
        method_code=method_code(method),
        if_modified_since=parse_if_modified_since(get_header(headers, "If-Modified-Since")),
        if_none_match=parse_if_none_match(get_header(headers, "If-None-Match")),
        range_start=start,
        range_end=end,
    )
