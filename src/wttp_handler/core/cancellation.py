"""Cancellation primitives shared by every await of a fetch.

A fetch runs as one task; a deadline and an optional CancellationToken are
raced against it, so a single timeout bounds the whole redirect chain and a
cancel interrupts whichever call is in flight.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Optional, TypeVar

from ..errors import FetchCancelledError

T = TypeVar("T")


class CancellationToken:
    """Cancellation signal for in-flight fetches.

    Examples:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(handler.fetch(url, cancel_token=token))
        >>> token.cancel()  # the fetch fails with FetchCancelledError
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def run_cancellable(
    awaitable: Awaitable[T],
    *,
    token: Optional[CancellationToken] = None,
    timeout: Optional[float] = None,
    url: Optional[str] = None,
) -> T:
    """
    Await ``awaitable`` under a deadline and a cancellation token.

    Args:
        awaitable: The work to run
        token: Token that aborts the work when cancelled
        timeout: Seconds before the work is aborted (None = no deadline)
        url: URL reported on the cancellation error

    Returns:
        The awaitable's result

    Raises:
        FetchCancelledError: If the token fires or the deadline passes first
    """
    if token is not None and token.is_cancelled():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise FetchCancelledError("Fetch cancelled before it started", url=url)

    if token is None and timeout is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    waiters: set[asyncio.Future] = {task}
    cancel_waiter: Optional[asyncio.Future] = None
    if token is not None:
        cancel_waiter = asyncio.ensure_future(token.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        for waiter in waiters:
            waiter.cancel()
        raise

    if cancel_waiter is not None:
        cancel_waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)

    if token is not None and token.is_cancelled():
        raise FetchCancelledError("Fetch cancelled", url=url)
    raise FetchCancelledError(f"Fetch exceeded its deadline of {timeout}s", url=url)
