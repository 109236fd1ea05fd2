"""
wttp-handler - fetch WTTP resources as ordinary HTTP responses.

Usage:
    from wttp_handler import WttpConfig, WttpHandler

    config = WttpConfig.from_yaml_file(Path("wttp.yaml"))
    handler = WttpHandler(config, adapter, name_resolver=ens)

    async with handler:
        response = await handler.fetch("wttp://site.eth:sepolia/index.html")
        print(response.status, response.headers.get("Content-Type"))
"""

__version__ = "0.3.0"

from .core import (
    CancellationToken,
    EndpointDescriptor,
    RedirectPolicy,
    RequestInit,
    WttpHandler,
    WttpResponse,
    fetch_blocking,
)
from .chain import ChainAdapter, NameResolver
from .errors import (
    FetchCancelledError,
    InvalidGatewayError,
    InvalidHostError,
    NameResolutionError,
    RedirectPolicyError,
    RequestError,
    TooManyRedirectsError,
    TransportError,
    UnsupportedSchemeError,
    UrlError,
    WttpError,
)
from .http import AsyncHttpClient, HttpClient
from .logging_config import setup_logging
from .models import (
    CacheControl,
    GetResult,
    Method,
    NetworkConfig,
    ProtocolRequest,
    Redirect,
    ResourceMetadata,
    ResponseHead,
    WttpConfig,
    default_config,
)

__all__ = [
    "__version__",
    # Core
    "WttpHandler",
    "RequestInit",
    "RedirectPolicy",
    "CancellationToken",
    "EndpointDescriptor",
    "WttpResponse",
    "fetch_blocking",
    # Collaborators
    "ChainAdapter",
    "NameResolver",
    "HttpClient",
    "AsyncHttpClient",
    # Config
    "WttpConfig",
    "NetworkConfig",
    "default_config",
    "setup_logging",
    # Protocol
    "CacheControl",
    "GetResult",
    "Method",
    "ProtocolRequest",
    "Redirect",
    "ResourceMetadata",
    "ResponseHead",
    # Errors
    "WttpError",
    "UrlError",
    "UnsupportedSchemeError",
    "NameResolutionError",
    "RequestError",
    "InvalidHostError",
    "InvalidGatewayError",
    "TransportError",
    "RedirectPolicyError",
    "TooManyRedirectsError",
    "FetchCancelledError",
]
