"""Trailing-edge debounce for async callbacks."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` once no trigger has arrived for ``delay`` seconds.

    Each ``trigger`` cancels the pending timer. A callback that has already
    started is left to finish unless the debouncer is cancelled.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.delay = delay
        self._callback = callback
        self._timer: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def running(self) -> int:
        return len(self._running)

    def trigger(self) -> None:
        if self.pending:
            self._timer.cancel()
        self._timer = asyncio.create_task(self._wait_then_run())

    async def _wait_then_run(self) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.create_task(self._callback())
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def flush(self) -> None:
        """Wait for the pending timer and every callback still running."""

        if self._timer is not None:
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
        if self._running:
            await asyncio.gather(*self._running)

    def cancel(self) -> None:
        """Drop the pending timer and stop callbacks that are still running."""

        if self.pending:
            self._timer.cancel()
        self._timer = None
        for task in list(self._running):
            task.cancel()
