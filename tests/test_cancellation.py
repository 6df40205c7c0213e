# ═══════════════════════════════════════════════════════════════
# cmdrunner - Cancellation Token Tests
# ═══════════════════════════════════════════════════════════════

import asyncio
import threading
import time

import pytest

from cmdrunner.runners import CancellationToken


class TestCancellationToken:
    """Tests for CancellationToken state."""

    def test_new_token_not_cancelled(self):
        token = CancellationToken()

        assert token.cancelled is False
        assert token.reason is None
        assert token.deadline is None
        assert token.remaining() is None

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()

        assert token.cancelled is True
        assert token.reason == CancellationToken.REASON_CANCELLED

    def test_cancel_twice_keeps_first_reason(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()

        assert token.reason == CancellationToken.REASON_CANCELLED

    def test_deadline_passes(self):
        token = CancellationToken.with_timeout(0.01)
        time.sleep(0.05)

        assert token.cancelled is True
        assert token.reason == CancellationToken.REASON_DEADLINE
        assert token.remaining() == 0.0

    def test_zero_timeout_fires_immediately(self):
        token = CancellationToken(timeout=0)

        assert token.cancelled is True

    def test_remaining_counts_down(self):
        token = CancellationToken.with_timeout(10)

        assert 0 < token.remaining() <= 10
        assert token.cancelled is False


class TestCancellationTokenWait:
    """Tests for CancellationToken.wait()."""

    @pytest.mark.asyncio
    async def test_wait_returns_on_deadline(self):
        token = CancellationToken.with_timeout(0.1)

        started = time.monotonic()
        await token.wait()

        assert time.monotonic() - started < 1.0
        assert token.reason == CancellationToken.REASON_DEADLINE

    @pytest.mark.asyncio
    async def test_wait_returns_on_cancel_from_task(self):
        token = CancellationToken()

        asyncio.get_running_loop().call_later(0.05, token.cancel)
        await asyncio.wait_for(token.wait(), timeout=2)

        assert token.cancelled is True

    @pytest.mark.asyncio
    async def test_wait_returns_on_cancel_from_thread(self):
        token = CancellationToken()

        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            await asyncio.wait_for(token.wait(), timeout=2)
        finally:
            timer.cancel()

        assert token.reason == CancellationToken.REASON_CANCELLED

    @pytest.mark.asyncio
    async def test_wait_on_fired_token_returns_immediately(self):
        token = CancellationToken()
        token.cancel()

        await asyncio.wait_for(token.wait(), timeout=0.5)

    @pytest.mark.asyncio
    async def test_wait_without_deadline_blocks(self):
        token = CancellationToken()

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(token.wait(), timeout=0.05)

        assert token.cancelled is False
