"""Core fetch engine: URL resolution, validation, synthesis, and redirects."""

from .cancellation import CancellationToken, run_cancellable
from .handler import RequestInit, WttpHandler, fetch_blocking
from .redirects import Fail, RedirectContext, RedirectPolicy, RedirectResolver, Retry, Return
from .request_builder import build_request
from .resolver import AddressResolver, EndpointDescriptor
from .synthesizer import WttpResponse, synthesize
from .urls import resolve_reference, split_url
from .validator import EndpointValidator

__all__ = [
    "AddressResolver",
    "CancellationToken",
    "EndpointDescriptor",
    "EndpointValidator",
    "Fail",
    "RedirectContext",
    "RedirectPolicy",
    "RedirectResolver",
    "RequestInit",
    "Retry",
    "Return",
    "WttpHandler",
    "WttpResponse",
    "build_request",
    "fetch_blocking",
    "resolve_reference",
    "run_cancellable",
    "split_url",
    "synthesize",
]
