"""Cancellable repeating asyncio task.

A ``Ticker`` owns at most one background task. ``start()`` cancels any
previous task before scheduling the new one, and ``stop()`` cancels and awaits
it, so teardown is deterministic instead of being left to garbage collection.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from collections.abc import Awaitable, Callable

from worklog.utils.logging import get_logger

TickCallback = Callable[[], "Awaitable[None] | None"]


class Ticker:
    """Runs ``callback`` every ``interval`` seconds until stopped.

    Parameters
    ----------
    callback : TickCallback
        Plain or async callable invoked on every tick.
    interval : float
        Seconds between ticks. Actual firing may be late; callbacks must not
        assume a fixed cadence.
    name : str
        Task name, used in logs.
    """

    def __init__(self, callback: TickCallback, interval: float = 1.0, name: str = "ticker"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.callback = callback
        self.interval = interval
        self.name = name
        self.logger = get_logger("worklog.ticker").bind(ticker=name)
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """(Re)start ticking; any previous task is cancelled first."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        self.logger.debug("ticker.started", interval=self.interval)

    def cancel(self) -> None:
        """Request cancellation without waiting for it."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def stop(self) -> None:
        """Cancel the task and wait until it has finished."""
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        # The task may be the caller itself (a tick that stops its own ticker).
        if task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self.logger.debug("ticker.stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Keep ticking; one bad tick must not kill the display.
                self.logger.exception("ticker.callback_failed", error=str(exc))
