"""Redirect handling: decides whether to follow, report, or fail on a response.

Design:
- **Explicit hops**: the resolver never recurses; it returns an action and the
  fetch loop performs the next hop
- **Per-call state**: every top-level fetch gets its own RedirectContext, so
  concurrent fetches on one handler never share hop counts
- **Max hops + visited set**: loops are caught as soon as a URL repeats,
  long chains when the hop budget runs out
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from ..errors import RedirectPolicyError, TooManyRedirectsError, WttpError
from ..models.protocol import ResponseHead
from .synthesizer import WttpResponse, normalize_status
from .urls import resolve_reference, split_url

logger = logging.getLogger(__name__)

# Target of a 300 response that declares no location
DEFAULT_INDEX = "./index.html"

SAFE_METHODS = frozenset({"GET", "HEAD"})

# Dropped from the request when a redirect leaves the original origin
CREDENTIAL_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization"})


class RedirectPolicy(str, Enum):
    """How redirects are handled, mirroring the fetch ``redirect`` option."""

    FOLLOW = "follow"
    MANUAL = "manual"
    ERROR = "error"


def visit_key(url: str) -> str:
    """Normalise a URL for loop detection (case-insensitive host, no fragment)."""
    try:
        parts = split_url(url)
    except ValueError:
        return url
    return parts.replace(host=parts.host.lower(), fragment="", path=parts.path or "/").geturl()


def origin(url: str) -> tuple[str, str, str]:
    """Return the (scheme, host, port or network selector) origin of a URL."""
    try:
        parts = split_url(url)
    except ValueError:
        return (url, "", "")
    return (parts.scheme, parts.host.lower(), parts.selector or "")


def strip_credentials(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of ``headers`` without credential headers."""
    return {name: value for name, value in headers.items() if name.lower() not in CREDENTIAL_HEADERS}


@dataclass
class RedirectContext:
    """
    Redirect state of one top-level fetch.

    Attributes:
        visited: Normalised URLs already requested in this fetch
        remaining: Redirect hops still allowed
        original_method: Method of the top-level request
        original_body: Body of the top-level request
        hops: URLs requested so far, in order
    """

    visited: set[str]
    remaining: int
    original_method: str
    original_body: Optional[bytes] = None
    hops: list[str] = field(default_factory=list)
    max_redirects: int = 0

    @classmethod
    def start(
        cls,
        url: str,
        *,
        max_redirects: int,
        method: str = "GET",
        body: Optional[bytes] = None,
    ) -> RedirectContext:
        """Create the context for a new top-level fetch of ``url``."""
        return cls(
            visited={visit_key(url)},
            remaining=max_redirects,
            original_method=method.upper(),
            original_body=body,
            hops=[url],
            max_redirects=max_redirects,
        )

    @property
    def redirected(self) -> bool:
        return len(self.hops) > 1


@dataclass(frozen=True)
class Return:
    """Terminal action: hand the response to the caller."""

    response: WttpResponse


@dataclass(frozen=True)
class Retry:
    """Follow a redirect with a new request."""

    url: str
    method: str
    body: Optional[bytes] = None


@dataclass(frozen=True)
class Fail:
    """Terminal action: the fetch fails with an error."""

    error: WttpError


Action = Union[Return, Retry, Fail]


def redirect_method(status: int, method: str, body: Optional[bytes]) -> tuple[str, Optional[bytes]]:
    """
    Method and body to use for the request following a redirect.

    307 and 308 keep both; 303 always switches to a body-less GET; the
    remaining codes switch to GET only for methods other than GET and HEAD.
    """
    method = method.upper()
    if status in (307, 308):
        return method, body
    if status == 303:
        return "GET", None
    if method in SAFE_METHODS:
        return method, body
    return "GET", None


class RedirectResolver:
    """
    Decides what happens after a response has been synthesized.

    Example:
        resolver = RedirectResolver()
        ctx = RedirectContext.start(url, max_redirects=20)
        action = resolver.resolve(response, head, ctx, request_url=url, method="GET")
        if isinstance(action, Retry):
            ...  # request action.url with action.method / action.body
    """

    def resolve(
        self,
        response: WttpResponse,
        head: Optional[ResponseHead],
        ctx: RedirectContext,
        *,
        request_url: str,
        method: str,
        body: Optional[bytes] = None,
        policy: RedirectPolicy = RedirectPolicy.FOLLOW,
    ) -> Action:
        """
        Decide the next step for a response.

        Args:
            response: Synthesized response for the current hop
            head: Protocol head the response came from (None for plain HTTP)
            ctx: Redirect state of the current top-level fetch (updated on Retry)
            request_url: URL the current hop requested
            method: Method of the current hop
            body: Body of the current hop
            policy: Caller's redirect policy

        Returns:
            Return, Retry, or Fail
        """
        status = normalize_status(response.status)
        if status != response.status:
            response = replace(response, status=status)

        if head is not None:
            location = head.redirect.location.strip() if head.redirect.location else ""
        else:
            location = response.headers.get("Location", "").strip()

        if status == 300 and policy == RedirectPolicy.FOLLOW:
            # No content negotiation here: fall back to the declared default
            status = 302
            location = location or DEFAULT_INDEX

        if status == 304 and response.body is not None:
            response = replace(response, body=None)

        if not 300 <= status < 400:
            return Return(response)

        if policy == RedirectPolicy.ERROR:
            return Fail(RedirectPolicyError(status, location, url=request_url))

        if policy == RedirectPolicy.MANUAL or status == 304:
            return Return(response)

        if not location:
            logger.debug(f"Redirect {status} from {request_url} has no location, returning as-is")
            return Return(response)

        target = resolve_reference(request_url, location)
        key = visit_key(target)
        if key in ctx.visited:
            logger.warning(f"Redirect loop detected: {request_url} -> {target}")
            return Fail(TooManyRedirectsError(ctx.max_redirects, ctx.hops + [target], loop=True))
        if ctx.remaining <= 0:
            logger.warning(f"Redirect limit of {ctx.max_redirects} reached at {request_url}")
            return Fail(TooManyRedirectsError(ctx.max_redirects, ctx.hops + [target]))

        new_method, new_body = redirect_method(status, method, body)
        ctx.remaining -= 1
        ctx.visited.add(key)
        ctx.hops.append(target)

        logger.debug(f"Following {status} {request_url} -> {target} as {new_method}")
        return Retry(url=target, method=new_method, body=new_body)
