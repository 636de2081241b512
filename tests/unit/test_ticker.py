"""Ticker tests (real event loop, short intervals)."""

import asyncio

import pytest

from worklog.core.ticker import Ticker


class TestTicker:
    """Tests for the cancellable repeating task."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Ticker(lambda: None, interval=0)

    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self):
        calls = []
        ticker = Ticker(lambda: calls.append(1), interval=0.01)

        ticker.start()
        await asyncio.sleep(0.08)
        await ticker.stop()
        count = len(calls)
        await asyncio.sleep(0.05)

        assert count >= 1
        assert len(calls) == count
        assert ticker.running is False

    @pytest.mark.asyncio
    async def test_restart_replaces_previous_task(self):
        ticker = Ticker(lambda: None, interval=10)

        ticker.start()
        first = ticker._task
        ticker.start()
        await asyncio.sleep(0.01)

        assert first.cancelled()
        assert ticker._task is not first
        assert ticker.running is True
        await ticker.stop()

    @pytest.mark.asyncio
    async def test_awaits_async_callbacks(self):
        calls = []

        async def callback():
            calls.append(1)

        ticker = Ticker(callback, interval=0.01)
        ticker.start()
        await asyncio.sleep(0.05)
        await ticker.stop()

        assert calls

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_ticking(self):
        calls = []

        def callback():
            calls.append(1)
            raise RuntimeError("boom")

        ticker = Ticker(callback, interval=0.01)
        ticker.start()
        await asyncio.sleep(0.08)
        await ticker.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        ticker = Ticker(lambda: None, interval=1)
        ticker.start()

        await ticker.stop()
        await ticker.stop()

        assert ticker.running is False
