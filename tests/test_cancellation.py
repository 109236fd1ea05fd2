"""Tests for deadlines and cancellation tokens."""

import asyncio

import pytest
from wttp_handler.core.cancellation import CancellationToken, run_cancellable
from wttp_handler.errors import FetchCancelledError


async def slow(result="done", delay=5.0):
    await asyncio.sleep(delay)
    return result


class TestRunCancellable:
    """Tests for run_cancellable."""

    @pytest.mark.asyncio
    async def test_plain_await(self):
        assert await run_cancellable(slow(delay=0)) == "done"

    @pytest.mark.asyncio
    async def test_completes_before_deadline(self):
        assert await run_cancellable(slow(delay=0.01), timeout=1.0) == "done"

    @pytest.mark.asyncio
    async def test_deadline(self):
        """Test that the deadline aborts slow work."""
        with pytest.raises(FetchCancelledError, match="deadline"):
            await run_cancellable(slow(), timeout=0.05, url="wttp://x/")

    @pytest.mark.asyncio
    async def test_token(self):
        token = CancellationToken()

        async def cancel_soon():
            await asyncio.sleep(0.01)
            token.cancel()

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(FetchCancelledError) as exc_info:
            await run_cancellable(slow(), token=token, url="wttp://x/")
        await canceller
        assert exc_info.value.url == "wttp://x/"
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_already_cancelled(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled()
        with pytest.raises(FetchCancelledError):
            await run_cancellable(slow(), token=token)

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        async def broken():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await run_cancellable(broken(), timeout=1.0)
