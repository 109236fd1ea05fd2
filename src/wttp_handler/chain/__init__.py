"""Chain-side collaborator interfaces for wttp-handler."""

from .protocols import ChainAdapter, NameResolver

__all__ = [
    "ChainAdapter",
    "NameResolver",
]
