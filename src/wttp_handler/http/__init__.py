"""Plain HTTP client for wttp-handler."""

from .client import AsyncHttpClient
from .protocols import HttpClient

__all__ = [
    "AsyncHttpClient",
    "HttpClient",
]
