"""WttpHandler: fetch entry point driving resolution, validation, and redirects."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import TracebackType
from typing import Any, Optional, Union

from ..chain.protocols import ChainAdapter, NameResolver
from ..errors import InvalidGatewayError, InvalidHostError, RequestError, TransportError, WttpError
from ..http.client import AsyncHttpClient
from ..http.protocols import HttpClient
from ..models.config import WttpConfig, default_config
from ..models.protocol import GetResult, Method, ProtocolRequest, ResponseHead
from .cancellation import CancellationToken, run_cancellable
from .redirects import (
    Fail,
    RedirectContext,
    RedirectPolicy,
    RedirectResolver,
    Retry,
    Return,
    origin,
    strip_credentials,
)
from .request_builder import build_request
from .resolver import AddressResolver, EndpointDescriptor
from .synthesizer import WttpResponse, synthesize
from .urls import get_scheme
from .validator import EndpointValidator

logger = logging.getLogger(__name__)

HTTP_SCHEMES = frozenset({"http", "https"})

# Methods answered from the HEAD response without a GET
READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass
class RequestInit:
    """
    Options for a single fetch, mirroring the fetch API's ``RequestInit``.

    Attributes:
        method: HTTP-style method (GET, HEAD, OPTIONS, POST, ...)
        headers: Request headers; If-Modified-Since, If-None-Match and Range
            are mapped onto the protocol request. Authorization and cookies
            are dropped once a redirect leaves the original origin.
        body: Request body, carried across 307/308 redirects
        redirect: Redirect policy: follow, manual, or error
        signer: Opaque signer forwarded to the chain adapter
        timeout: Deadline in seconds for the whole fetch, redirects included
        cancel_token: Token that aborts the fetch when cancelled
    """

    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    redirect: Union[RedirectPolicy, str] = RedirectPolicy.FOLLOW
    signer: Optional[Any] = None
    timeout: Optional[float] = None
    cancel_token: Optional[CancellationToken] = None


class WttpHandler:
    """
    Fetches ``wttp://`` (and plain ``http(s)://``) URLs as HTTP-shaped responses.

    The handler holds only read-only state (configuration and collaborators),
    so it can be shared by concurrent fetches; redirect state lives in a
    RedirectContext created per call.

    Example:
        handler = WttpHandler(config, adapter, name_resolver=ens)

        async with handler:
            response = await handler.fetch("wttp://site.eth/index.html")
            if response.ok:
                print(response.headers["Content-Type"], response.text())
    """

    def __init__(
        self,
        config: Optional[WttpConfig] = None,
        adapter: Optional[ChainAdapter] = None,
        *,
        name_resolver: Optional[NameResolver] = None,
        http_client: Optional[HttpClient] = None,
        signer: Optional[Any] = None,
        static_signer: bool = False,
    ):
        """
        Initialize the handler.

        Args:
            config: Network table and fetch defaults (local chain if omitted)
            adapter: Chain adapter executing WTTP calls
            name_resolver: Resolver for ``.eth`` host names
            http_client: Client for plain HTTP URLs (aiohttp client if omitted)
            signer: Signer shared by all fetches when static_signer is set
            static_signer: Forward ``signer`` unless a request brings its own
        """
        self.config = config or default_config()
        self.adapter = adapter
        self.resolver = AddressResolver(self.config, name_resolver)
        self.validator = EndpointValidator(adapter) if adapter is not None else None
        self.redirects = RedirectResolver()
        self._http_client = http_client
        self._owned_http_client: Optional[AsyncHttpClient] = None
        self._signer = signer if static_signer else None

    async def __aenter__(self) -> WttpHandler:
        """Enter async context and open the HTTP client if none was supplied."""
        if self._http_client is None:
            self._owned_http_client = AsyncHttpClient()
            await self._owned_http_client.__aenter__()
            self._http_client = self._owned_http_client
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context and close the HTTP client it opened."""
        if self._owned_http_client is not None:
            await self._owned_http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._owned_http_client = None
            self._http_client = None

    async def fetch(self, url: str, init: Optional[RequestInit] = None, **options: Any) -> WttpResponse:
        """
        Fetch a URL.

        Args:
            url: ``wttp://``, ``http://`` or ``https://`` URL
            init: Request options
            **options: RequestInit fields, overriding those in ``init``

        Returns:
            WttpResponse for the final hop

        Raises:
            WttpError: On URL, validation, transport, redirect, or cancellation
                failures. With ``error_responses`` enabled in the config,
                errors that have an HTTP status are returned as responses.
        """
        init = replace(init, **options) if init is not None else RequestInit(**options)
        url = str(url)
        timeout = init.timeout if init.timeout is not None else self.config.timeout

        try:
            return await run_cancellable(
                self._fetch(url, init),
                token=init.cancel_token,
                timeout=timeout,
                url=url,
            )
        except WttpError as e:
            if self.config.error_responses and e.status is not None:
                logger.debug(f"Returning {e.status} for {url}: {e}")
                return e.to_response()
            raise

    async def _fetch(self, url: str, init: RequestInit) -> WttpResponse:
        try:
            policy = RedirectPolicy(init.redirect)
        except ValueError as e:
            raise RequestError(f"Invalid redirect policy: {init.redirect!r}", url=url) from e
        signer = init.signer if init.signer is not None else self._signer
        method = init.method.upper()
        body = init.body
        ctx = RedirectContext.start(url, max_redirects=self.config.max_redirects, method=method, body=body)
        validated: list[EndpointDescriptor] = []
        headers: Mapping[str, str] = init.headers

        current = url
        while True:
            head: Optional[ResponseHead] = None
            endpoint: Optional[EndpointDescriptor] = None
            request: Optional[ProtocolRequest] = None

            if get_scheme(current) in HTTP_SCHEMES:
                response = await self._http_request(method, current, headers, body)
            else:
                endpoint = await self.resolver.resolve(current)
                await self._validate_once(endpoint, validated, signer)
                request = build_request(endpoint, method, headers)
                head = await self._head(endpoint, request, signer)
                response = synthesize(head, request_url=current, host=endpoint.requested_host)

            action = self.redirects.resolve(
                response,
                head,
                ctx,
                request_url=current,
                method=method,
                body=body,
                policy=policy,
            )

            if isinstance(action, Retry):
                if origin(action.url) != origin(current):
                    headers = strip_credentials(headers)
                current, method, body = action.url, action.method, action.body
                continue
            if isinstance(action, Fail):
                raise action.error

            response = action.response
            if endpoint is not None and request is not None and response.ok:
                response = await self._complete(endpoint, request, method, response, current, signer)

            return replace(response, redirected=ctx.redirected)

    async def _complete(
        self,
        endpoint: EndpointDescriptor,
        request: ProtocolRequest,
        method: str,
        response: WttpResponse,
        url: str,
        signer: Optional[Any],
    ) -> WttpResponse:
        """Turn a successful HEAD answer into the final response for ``method``."""
        if method == "GET":
            result = await self._get(endpoint, request, signer)
            return synthesize(
                result.head,
                result.data if result.data is not None else b"",
                request_url=url,
                host=endpoint.requested_host,
                byte_range=(result.range_start, result.range_end),
            )

        if method not in READ_METHODS:
            logger.debug(f"{method} not supported for {url}")
            headers = response.headers.copy()
            for name in ("Content-Length", "Content-Type", "Content-Encoding", "Content-Language"):
                headers.popall(name, None)
            return WttpResponse(status=405, headers=headers, body=None, url=url)

        return response

    async def _validate_once(
        self,
        endpoint: EndpointDescriptor,
        validated: list[EndpointDescriptor],
        signer: Optional[Any],
    ) -> None:
        if not self.config.validate_endpoints:
            return
        if any(endpoint.same_site(seen) for seen in validated):
            return
        await self._require_validator().validate(endpoint, signer=signer)
        validated.append(endpoint)

    async def _head(
        self,
        endpoint: EndpointDescriptor,
        request: ProtocolRequest,
        signer: Optional[Any],
    ) -> ResponseHead:
        adapter = self._require_adapter()
        head_request = replace(request, method_code=int(Method.HEAD))
        try:
            return await adapter.head_request(endpoint, head_request, signer=signer)
        except Exception as e:
            raise await self._attribute_failure(endpoint, "HEAD", e, signer) from e

    async def _get(
        self,
        endpoint: EndpointDescriptor,
        request: ProtocolRequest,
        signer: Optional[Any],
    ) -> GetResult:
        adapter = self._require_adapter()
        try:
            return await adapter.get_request(endpoint, request, signer=signer)
        except Exception as e:
            raise await self._attribute_failure(endpoint, "GET", e, signer) from e

    async def _attribute_failure(
        self,
        endpoint: EndpointDescriptor,
        call: str,
        error: Exception,
        signer: Optional[Any],
    ) -> WttpError:
        """Re-probe the endpoint to tell a broken host or gateway from a failed call."""
        logger.error(f"WTTP {call} failed for {endpoint.url}: {error}")
        if self.validator is not None and self.config.validate_endpoints:
            try:
                await self.validator.validate(endpoint, signer=signer)
            except (InvalidHostError, InvalidGatewayError) as invalid:
                return invalid
        return TransportError(
            f"WTTP {call} request for {endpoint.original_url} failed: {error}",
            url=endpoint.original_url,
            cause=error,
        )

    async def _http_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
    ) -> WttpResponse:
        if self._http_client is not None:
            return await self._http_client.request(method, url, headers=headers, body=body)
        async with AsyncHttpClient() as client:
            return await client.request(method, url, headers=headers, body=body)

    def _require_adapter(self) -> ChainAdapter:
        if self.adapter is None:
            raise RuntimeError("No chain adapter configured. Pass one to WttpHandler().")
        return self.adapter

    def _require_validator(self) -> EndpointValidator:
        if self.validator is None:
            raise RuntimeError("No chain adapter configured. Pass one to WttpHandler().")
        return self.validator


def fetch_blocking(
    handler: WttpHandler,
    url: str,
    init: Optional[RequestInit] = None,
    **options: Any,
) -> WttpResponse:
    """
    Blocking fetch for sync code that can't use async/await.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use ``await handler.fetch()`` instead.

    Example:
        response = fetch_blocking(handler, "wttp://site.eth/index.html")
        print(response.status)
    """
    # Detect if we're already in an async context
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("fetch_blocking() called from async context. Use 'await handler.fetch()' instead.")

    async def _run() -> WttpResponse:
        async with handler:
            return await handler.fetch(url, init, **options)

    return asyncio.run(_run())
