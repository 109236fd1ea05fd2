"""Shared test helpers: an in-memory chain adapter and test configuration."""

import asyncio
from typing import Optional

from wttp_handler.models.config import NetworkConfig, WttpConfig
from wttp_handler.models.protocol import (
    CacheControl,
    GetResult,
    Redirect,
    ResourceMetadata,
    ResponseHead,
    methods_bitmask,
)

# EIP-55 checksummed addresses
HOST = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
OTHER_HOST = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
LOCAL_GATEWAY = "0x36C02dA8a0983159322a80FFE9F24b1acfF8B570"
SEPOLIA_GATEWAY = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"

ETAG = "0x" + "ab" * 32


def make_config(**overrides) -> WttpConfig:
    """Two-network config (localhost first, so it is the default)."""
    data = {
        "networks": {
            "localhost": NetworkConfig(
                rpc_endpoints=["http://localhost:8545"],
                chain_id=31337,
                gateway_address=LOCAL_GATEWAY,
            ),
            "sepolia": NetworkConfig(
                rpc_endpoints=["https://rpc.sepolia.example"],
                chain_id=11155111,
                gateway_address=SEPOLIA_GATEWAY,
            ),
        },
    }
    data.update(overrides)
    return WttpConfig(**data)


def html_head(status: int = 200, **metadata) -> ResponseHead:
    """HEAD answer for an HTML page cached publicly for an hour."""
    fields = {"mime_type": "text/html", "charset": "utf-8", "size": 13}
    fields.update(metadata)
    return ResponseHead(
        status_code=status,
        methods=methods_bitmask("HEAD", "GET"),
        cache=CacheControl(max_age=3600, public=True),
        metadata=ResourceMetadata(**fields),
        etag=ETAG,
    )


def redirect_head(status: int, location: str) -> ResponseHead:
    return ResponseHead(status_code=status, redirect=Redirect(code=status, location=location))


class FakeChain:
    """
    In-memory ChainAdapter.

    Resources are keyed by (host, path). Probe requests (path "404") answer
    with the configured probe statuses; unknown resources answer 404.
    """

    def __init__(self) -> None:
        self.heads: dict[tuple[str, str], ResponseHead] = {}
        self.bodies: dict[tuple[str, str], bytes] = {}
        self.host_probe_status = 404
        self.gateway_probe_status = 404
        self.fail_get: Optional[Exception] = None
        self.delay: dict[str, float] = {}
        self.calls: list[tuple] = []

    def add(self, path: str, head: ResponseHead, body: bytes = b"", host: str = HOST) -> None:
        self.heads[(host, path)] = head
        self.bodies[(host, path)] = body

    async def head_request(self, endpoint, request, *, direct=False, signer=None):
        self.calls.append(("HEAD", endpoint.canonical_host, request.path, direct, signer, request))
        if request.path == "404":
            return ResponseHead(status_code=self.host_probe_status if direct else self.gateway_probe_status)
        await asyncio.sleep(self.delay.get(request.path, 0))
        return self.heads.get((endpoint.canonical_host, request.path), ResponseHead(status_code=404))

    async def get_request(self, endpoint, request, *, signer=None):
        self.calls.append(("GET", endpoint.canonical_host, request.path, False, signer, request))
        if self.fail_get is not None:
            raise self.fail_get
        key = (endpoint.canonical_host, request.path)
        head = self.heads.get(key, ResponseHead(status_code=404))
        return GetResult(head=head, data=self.bodies.get(key, b""))

    def calls_for(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind and call[2] != "404"]

    def probe_calls(self) -> list[tuple]:
        return [call for call in self.calls if call[2] == "404"]
