"""Async HTTP client for plain ``http://`` and ``https://`` URLs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Optional

import aiohttp
from multidict import CIMultiDict

from ..core.synthesizer import WttpResponse
from ..errors import TransportError

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """
    Async HTTP client used when a URL or a redirect leaves the WTTP scheme.

    Features:
    - Redirects are returned, not followed, so one resolver drives every hop
    - Content size limits to prevent memory exhaustion
    - Timeout controls

    Example:
        async with AsyncHttpClient() as client:
            response = await client.request("GET", "https://example.com")
            print(response.text())
    """

    MAX_CONTENT_SIZE = 50 * 1024 * 1024  # 50 MB

    # Exceptions that count as transport failures
    TRANSPORT_EXCEPTIONS = (
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ConnectionError,
    )

    def __init__(
        self,
        max_content_size: int = MAX_CONTENT_SIZE,
        user_agent: Optional[str] = None,
        proxy: Optional[str] = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL (http:// or socks5://)
            default_timeout: Default request timeout in seconds
        """
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout
        self._user_agent = user_agent or "wttp-handler/0.3"
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self._user_agent})
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> WttpResponse:
        """
        Perform one HTTP request without following redirects.

        Args:
            method: HTTP method
            url: The URL to request
            headers: Optional request headers
            body: Optional request body
            timeout: Request timeout in seconds (uses default if None)

        Returns:
            WttpResponse with status, headers and body (None for HEAD)

        Raises:
            TransportError: On network errors or when the content size limit is exceeded
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout
        method = method.upper()

        try:
            async with self._session.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                data=body,
                timeout=aiohttp.ClientTimeout(total=timeout_val),
                proxy=self._proxy,
                allow_redirects=False,
            ) as response:
                # Check Content-Length if available
                content_length = response.headers.get("Content-Length")
                if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                    raise TransportError(f"Content too large: {content_length} bytes", url=url)

                content: Optional[bytes] = None
                if method != "HEAD":
                    content = b""
                    async for chunk in response.content.iter_chunked(8192):
                        content += chunk
                        if len(content) > self._max_content_size:
                            raise TransportError(
                                f"Content size limit exceeded: >{self._max_content_size} bytes",
                                url=url,
                            )

                return WttpResponse(
                    status=response.status,
                    headers=CIMultiDict(response.headers),
                    body=content,
                    url=str(response.url),
                )

        except self.TRANSPORT_EXCEPTIONS as e:
            logger.error(f"HTTP {method} error for {url}: {e}")
            raise TransportError(f"HTTP request to {url} failed: {e}", url=url, cause=e) from e
