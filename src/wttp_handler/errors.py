"""Exception hierarchy for WTTP fetch failures.

Every failure of a top-level ``fetch`` surfaces as a subclass of
:class:`WttpError`. Errors that have a natural HTTP equivalent carry it as
``status`` so callers that prefer HTTP-shaped results can convert them with
:meth:`WttpError.to_response` instead of handling exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .core.synthesizer import WttpResponse

__all__ = [
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


class WttpError(RuntimeError):
    """Base exception for WTTP resolution, validation, and fetch failures."""

    status: Optional[int] = None

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause

    def to_response(self) -> WttpResponse:
        """Render the error as an HTTP-shaped response.

        Raises:
            TypeError: If the error has no HTTP status equivalent.
        """
        from .core.synthesizer import WttpResponse

        if self.status is None:
            raise TypeError(f"{type(self).__name__} has no HTTP status equivalent")
        message = str(self)
        return WttpResponse(
            status=self.status,
            headers={
                "Content-Type": "text/plain",
                "WTTP-Error": message.splitlines()[0] if message else type(self).__name__,
            },
            body=f"WTTP fetch error: {message}".encode(),
            url=self.url or "",
        )


class UrlError(WttpError):
    """Raised when a WTTP URL is malformed or names an unknown host or network."""


class UnsupportedSchemeError(UrlError):
    """Raised when a URL uses a scheme other than wttp, http or https."""

    status = 505


class NameResolutionError(UrlError):
    """Raised when a name-service lookup for the host segment fails."""

    def __init__(self, name: str, *, url: Optional[str] = None, cause: Optional[BaseException] = None):
        self.name = name
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to resolve name {name}{detail}", url=url, cause=cause)


class RequestError(WttpError):
    """Raised when the caller's request cannot be mapped to a protocol request."""


class InvalidHostError(WttpError):
    """Raised when the content host does not implement the WTTP protocol."""

    status = 501

    def __init__(self, host: str, reason: str, *, url: Optional[str] = None, cause: Optional[BaseException] = None):
        self.host = host
        self.reason = reason
        super().__init__(f"Invalid WTTP host {host}: {reason}", url=url, cause=cause)


class InvalidGatewayError(WttpError):
    """Raised when the network gateway does not implement the WTTP protocol."""

    status = 502

    def __init__(
        self, gateway: str, reason: str, *, url: Optional[str] = None, cause: Optional[BaseException] = None
    ):
        self.gateway = gateway
        self.reason = reason
        super().__init__(f"Invalid WTTP gateway {gateway}: {reason}", url=url, cause=cause)


class TransportError(WttpError):
    """Raised when the chain adapter fails outright on a HEAD or GET call."""

    status = 500


class RedirectPolicyError(WttpError):
    """Raised when a redirect is met and the caller's policy is ``error``."""

    def __init__(self, status: int, location: str, *, url: Optional[str] = None):
        self.redirect_status = status
        self.location = location
        super().__init__(f"Redirect {status} to {location or '(no location)'} not allowed", url=url)


class TooManyRedirectsError(WttpError):
    """Raised when a redirect chain loops or exceeds the hop limit."""

    status = 508

    def __init__(self, max_hops: int, hops: list[str], *, loop: bool = False):
        self.max_hops = max_hops
        self.hops = hops
        self.loop = loop
        reason = "Redirect loop detected" if loop else f"Redirect chain exceeded {max_hops} hops"
        super().__init__(f"{reason}. Hops: {' -> '.join(hops)}", url=hops[0] if hops else None)


class FetchCancelledError(WttpError):
    """Raised when a fetch is aborted by its caller or runs past its deadline."""
