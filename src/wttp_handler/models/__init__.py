"""wttp-handler configuration and protocol models."""

from .config import DEFAULT_ALIASES, NetworkConfig, WttpConfig, default_config
from .protocol import (
    ALLOW_ORDER,
    WTTP_VERSION,
    ZERO_HASH,
    CacheControl,
    GetResult,
    Method,
    ProtocolRequest,
    Redirect,
    ResourceMetadata,
    ResponseHead,
    methods_bitmask,
)

__all__ = [
    # Config
    "DEFAULT_ALIASES",
    "NetworkConfig",
    "WttpConfig",
    "default_config",
    # Protocol
    "ALLOW_ORDER",
    "WTTP_VERSION",
    "ZERO_HASH",
    "CacheControl",
    "GetResult",
    "Method",
    "ProtocolRequest",
    "Redirect",
    "ResourceMetadata",
    "ResponseHead",
    "methods_bitmask",
]
