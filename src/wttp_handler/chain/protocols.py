"""Protocol definitions for the chain-side collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol

from ..models.config import NetworkConfig
from ..models.protocol import GetResult, ProtocolRequest, ResponseHead

if TYPE_CHECKING:
    from ..core.resolver import EndpointDescriptor


class ChainAdapter(Protocol):
    """
    Protocol for the transport that executes WTTP calls on chain.

    This abstraction allows for:
    - Mock implementations in tests
    - Different backends (web3.py, raw JSON-RPC, etc.)
    - Keeping RPC framing and retries out of the fetch logic
    """

    async def head_request(
        self,
        endpoint: EndpointDescriptor,
        request: ProtocolRequest,
        *,
        direct: bool = False,
        signer: Optional[Any] = None,
    ) -> ResponseHead:
        """
        Perform a WTTP HEAD call.

        Args:
            endpoint: Resolved host, gateway and network for the call
            request: Protocol request to send
            direct: Call the content host contract itself instead of the gateway
            signer: Opaque signer to attach to the call, if any

        Returns:
            ResponseHead as returned by the contract

        Raises:
            Exception on transport failures
        """
        ...

    async def get_request(
        self,
        endpoint: EndpointDescriptor,
        request: ProtocolRequest,
        *,
        signer: Optional[Any] = None,
    ) -> GetResult:
        """
        Perform a WTTP GET call through the gateway.

        Args:
            endpoint: Resolved host, gateway and network for the call
            request: Protocol request to send
            signer: Opaque signer to attach to the call, if any

        Returns:
            GetResult with the head and content payload

        Raises:
            Exception on transport failures
        """
        ...


class NameResolver(Protocol):
    """Protocol for name-service (ENS) lookups."""

    async def resolve_name(self, name: str, network: NetworkConfig) -> Optional[str]:
        """
        Resolve a name to an address.

        Args:
            name: Name ending in the name-service suffix (e.g. ``site.eth``)
            network: Network the URL selected

        Returns:
            The address, or None when the name has no address record

        Raises:
            Exception on lookup failures
        """
        ...
