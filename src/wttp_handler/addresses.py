"""Address validation and checksumming."""

from __future__ import annotations

from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

ENS_SUFFIX = ".eth"


def is_name(host: str) -> bool:
    """Check whether a host segment is a name-service name rather than an address."""
    return host.lower().endswith(ENS_SUFFIX)


def format_address(value: str, *, strict: bool = True) -> str:
    """
    Validate an address and return its checksummed form.

    Args:
        value: 0x-prefixed 20-byte hex address in any letter case
        strict: Reject mixed-case input whose checksum does not verify

    Returns:
        The EIP-55 checksummed address

    Raises:
        ValueError: If the address is malformed or fails checksum validation
    """
    value = str(value).strip()
    if not is_hex_address(value):
        raise ValueError(f"Invalid address: {value!r}")

    digits = value[2:]
    mixed_case = digits not in (digits.lower(), digits.upper())
    if strict and mixed_case and not is_checksum_address(value):
        raise ValueError(f"Invalid address checksum: {value!r}")

    return to_checksum_address(value)
