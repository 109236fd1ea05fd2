"""WTTP URL parsing and reference resolution.

The standard library's ``urljoin`` only resolves relative references for the
schemes it knows about, and ``SplitResult.port`` rejects the non-numeric
network selectors WTTP allows (``wttp://host:sepolia/``), so both are handled
here on top of ``urlsplit``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

WTTP_SCHEME = "wttp"


@dataclass(frozen=True)
class WttpUrlParts:
    """Components of a ``wttp://host[:network]/path[?query][#fragment]`` URL."""

    scheme: str
    host: str
    selector: Optional[str]
    path: str
    query: str
    fragment: str

    @property
    def netloc(self) -> str:
        return f"{self.host}:{self.selector}" if self.selector else self.host

    def geturl(self) -> str:
        return _build(self.scheme, self.netloc, self.path, self.query, self.fragment)

    def replace(self, **changes: object) -> WttpUrlParts:
        values = {
            "scheme": self.scheme,
            "host": self.host,
            "selector": self.selector,
            "path": self.path,
            "query": self.query,
            "fragment": self.fragment,
        }
        values.update(changes)
        return WttpUrlParts(**values)  # type: ignore[arg-type]


def _build(scheme: str, netloc: str, path: str, query: str, fragment: str) -> str:
    url = f"{scheme}://{netloc}{path}"
    if query:
        url += f"?{query}"
    if fragment:
        url += f"#{fragment}"
    return url


def get_scheme(url: str) -> str:
    """Return the lower-cased scheme of a URL, or an empty string."""
    try:
        return urlsplit(url).scheme.lower()
    except ValueError:
        return ""


def split_url(url: str) -> WttpUrlParts:
    """
    Split an absolute URL into its WTTP components.

    Args:
        url: Absolute URL with an authority (``scheme://...``)

    Returns:
        WttpUrlParts with the host and network selector separated

    Raises:
        ValueError: If the URL cannot be split
    """
    parsed = urlsplit(url.strip())
    netloc = parsed.netloc
    if "@" in netloc:
        raise ValueError(f"Credentials are not allowed in URL: {url}")

    host, sep, selector = netloc.rpartition(":")
    if not sep:
        host, selector = netloc, ""

    return WttpUrlParts(
        scheme=parsed.scheme.lower(),
        host=host,
        selector=selector or None,
        path=parsed.path,
        query=parsed.query,
        fragment=parsed.fragment,
    )


def remove_dot_segments(path: str) -> str:
    """Remove ``.`` and ``..`` segments from a URL path (RFC 3986, 5.2.4)."""
    absolute = path.startswith("/")
    segments = path.split("/")
    if absolute:
        segments = segments[1:]

    output: list[str] = []
    for segment in segments:
        if segment == "..":
            if output:
                output.pop()
        elif segment != ".":
            output.append(segment)

    # A trailing dot segment still names a directory
    if segments and segments[-1] in (".", ".."):
        output.append("")

    result = "/".join(output)
    return "/" + result if absolute else result


def resolve_reference(base: str, reference: str) -> str:
    """
    Resolve a (possibly relative) reference against an absolute base URL.

    Works for any scheme with an authority, including ``wttp``.

    Args:
        base: Absolute URL the reference was found on
        reference: Absolute or relative reference

    Returns:
        Absolute URL

    Example:
        >>> resolve_reference("wttp://host/path/to/page.html", "../resource.html")
        'wttp://host/path/resource.html'
    """
    ref = urlsplit(reference)
    if ref.scheme:
        if not ref.netloc:
            return reference
        return _build(ref.scheme, ref.netloc, remove_dot_segments(ref.path), ref.query, ref.fragment)

    b = urlsplit(base)
    has_query = "?" in reference.split("#", 1)[0]

    if reference.startswith("//"):
        return _build(b.scheme, ref.netloc, remove_dot_segments(ref.path), ref.query, ref.fragment)

    if not ref.path:
        path = b.path
        query = ref.query if has_query else b.query
    elif ref.path.startswith("/"):
        path = remove_dot_segments(ref.path)
        query = ref.query
    else:
        if b.netloc and not b.path:
            merged = "/" + ref.path
        else:
            merged = b.path[: b.path.rfind("/") + 1] + ref.path
        path = remove_dot_segments(merged)
        query = ref.query

    return _build(b.scheme, b.netloc, path or "/", query, ref.fragment)
