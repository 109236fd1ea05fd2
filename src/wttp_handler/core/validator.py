"""Protocol conformance probes for content hosts and gateways."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..chain.protocols import ChainAdapter
from ..errors import InvalidGatewayError, InvalidHostError
from ..models.protocol import Method, ProtocolRequest
from .resolver import EndpointDescriptor

logger = logging.getLogger(__name__)

# Conforming implementations answer 404 since the path doesn't start with a /
PROBE_REQUEST = ProtocolRequest(path="404", method_code=Method.HEAD)
PROBE_STATUS = 404


class EndpointValidator:
    """
    Confirms that a host and its gateway actually speak WTTP.

    Both contracts are sent a HEAD request for a path without a leading
    slash. Anything other than a 404 answer, including a failed call, means
    the contract does not implement the protocol.

    Example:
        validator = EndpointValidator(adapter)
        await validator.validate(endpoint)  # raises InvalidHostError / InvalidGatewayError
    """

    def __init__(self, adapter: ChainAdapter):
        self.adapter = adapter

    async def validate(self, endpoint: EndpointDescriptor, *, signer: Optional[Any] = None) -> None:
        """
        Probe the content host, then the gateway.

        Args:
            endpoint: Endpoint to validate
            signer: Opaque signer forwarded to the adapter

        Raises:
            InvalidHostError: If the content host fails the probe (501)
            InvalidGatewayError: If the gateway fails the probe (502)
        """
        host = endpoint.canonical_host
        try:
            head = await self.adapter.head_request(endpoint, PROBE_REQUEST, direct=True, signer=signer)
        except Exception as e:
            logger.warning(f"Host probe failed for {host}: {e}")
            raise InvalidHostError(host, f"invalid contract: {e}", url=endpoint.original_url, cause=e) from e
        if head.status_code != PROBE_STATUS:
            logger.warning(f"Host {host} answered probe with {head.status_code}")
            raise InvalidHostError(
                host,
                f"site responded with {head.status_code} instead of {PROBE_STATUS}",
                url=endpoint.original_url,
            )

        gateway = endpoint.gateway_address
        try:
            head = await self.adapter.head_request(endpoint, PROBE_REQUEST, signer=signer)
        except Exception as e:
            logger.warning(f"Gateway probe failed for {gateway}: {e}")
            raise InvalidGatewayError(gateway, str(e), url=endpoint.original_url, cause=e) from e
        if head.status_code != PROBE_STATUS:
            logger.warning(f"Gateway {gateway} answered probe with {head.status_code}")
            raise InvalidGatewayError(
                gateway,
                f"gateway responded with {head.status_code} instead of {PROBE_STATUS}",
                url=endpoint.original_url,
            )

        logger.debug(f"Validated host {host} and gateway {gateway} on {endpoint.network.name}")
