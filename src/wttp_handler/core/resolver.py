"""Resolution of WTTP URLs into endpoint descriptors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..addresses import format_address, is_name
from ..chain.protocols import NameResolver
from ..errors import NameResolutionError, UnsupportedSchemeError, UrlError
from ..models.config import NetworkConfig, WttpConfig
from .urls import WTTP_SCHEME, split_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointDescriptor:
    """
    Fully resolved target of a WTTP request.

    Attributes:
        canonical_host: Checksummed address of the content host
        network: Network the host lives on
        path: Resource path (never empty)
        original_url: URL exactly as the caller supplied it
        url: Canonical URL (checksummed host, default path applied)
        requested_host: Host segment as the caller wrote it (address or name)
    """

    canonical_host: str
    network: NetworkConfig
    path: str
    original_url: str
    url: str
    requested_host: str

    @property
    def gateway_address(self) -> str:
        return self.network.gateway_address

    def same_site(self, other: EndpointDescriptor) -> bool:
        """Check whether two endpoints address the same host on the same network."""
        return self.canonical_host == other.canonical_host and self.network.name == other.network.name


class AddressResolver:
    """
    Turns ``wttp://`` URLs into EndpointDescriptors.

    Host segments ending in ``.eth`` are looked up through the name resolver;
    anything else must be a literal address.

    Example:
        resolver = AddressResolver(config, name_resolver=ens)
        endpoint = await resolver.resolve("wttp://site.eth:sepolia/index.html")
        print(endpoint.canonical_host, endpoint.network.name)
    """

    def __init__(self, config: WttpConfig, name_resolver: Optional[NameResolver] = None):
        self.config = config
        self.name_resolver = name_resolver

    async def resolve(self, raw_url: str) -> EndpointDescriptor:
        """
        Resolve a WTTP URL.

        Args:
            raw_url: The URL to resolve

        Returns:
            EndpointDescriptor for the URL

        Raises:
            UrlError: On a wrong scheme, missing or invalid host, or unknown network
            NameResolutionError: If a name-service lookup fails
        """
        raw_url = str(raw_url)
        try:
            parts = split_url(raw_url)
        except ValueError as e:
            raise UrlError(f"Invalid WTTP URL: {raw_url}: {e}", url=raw_url, cause=e) from e

        if parts.scheme != WTTP_SCHEME:
            raise UnsupportedSchemeError(
                f"Invalid WTTP URL: {raw_url} - scheme must be {WTTP_SCHEME}://",
                url=raw_url,
            )
        if not parts.host:
            raise UrlError(f"Invalid WTTP URL: {raw_url} - missing host", url=raw_url)

        network = self.config.get_network(parts.selector)
        if network is None:
            raise UrlError(
                f"Invalid WTTP URL: {raw_url} - unknown network: {parts.selector}",
                url=raw_url,
            )

        if is_name(parts.host):
            host = await self._resolve_name(parts.host, network, raw_url)
        else:
            try:
                host = format_address(parts.host, strict=self.config.strict_checksum)
            except ValueError as e:
                raise UrlError(
                    f"Invalid WTTP URL: {raw_url} - invalid host: {parts.host}: {e}",
                    url=raw_url,
                    cause=e,
                ) from e

        path = parts.path or "/"
        return EndpointDescriptor(
            canonical_host=host,
            network=network,
            path=path,
            original_url=raw_url,
            url=parts.replace(host=host, path=path).geturl(),
            requested_host=parts.host,
        )

    async def _resolve_name(self, name: str, network: NetworkConfig, raw_url: str) -> str:
        if self.name_resolver is None:
            raise NameResolutionError(name, url=raw_url, cause=LookupError("no name resolver configured"))

        try:
            address = await self.name_resolver.resolve_name(name, network)
        except Exception as e:
            raise NameResolutionError(name, url=raw_url, cause=e) from e

        if not address:
            raise NameResolutionError(name, url=raw_url, cause=LookupError("name has no address record"))

        try:
            resolved = format_address(address, strict=False)
        except ValueError as e:
            raise NameResolutionError(name, url=raw_url, cause=e) from e

        logger.debug(f"Resolved {name} to {resolved} on {network.name}")
        return resolved
