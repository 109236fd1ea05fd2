"""Protocol definitions for the plain HTTP client."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..core.synthesizer import WttpResponse


class HttpClient(Protocol):
    """
    Protocol for HTTP clients used for ``http://`` and ``https://`` URLs.

    This abstraction allows for:
    - Mock implementations in tests
    - Different backends (aiohttp, httpx, etc.)
    - Redirects driven by the same resolver as WTTP responses
    """

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
            timeout: Request timeout in seconds

        Returns:
            WttpResponse with status, headers and body

        Raises:
            TransportError on network errors
        """
        ...
