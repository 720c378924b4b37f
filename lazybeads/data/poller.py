"""Periodic refresh trigger."""

import asyncio
from typing import Awaitable, Callable

from .. import logging_bridge as log


class RefreshPoller:
    """Call registered callbacks every poll_interval seconds."""

    def __init__(self, poll_interval: float = 2.0):
        """Initialize poller.

        Args:
            poll_interval: Seconds between ticks (default 2.0).
        """
        self.poll_interval = poll_interval
        self._running = False
        self._task: asyncio.Task | None = None
        self._callbacks: list[Callable[[], Awaitable[None]]] = []

    @property
    def running(self) -> bool:
        return self._running

    def on_tick(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Register callback to run on every tick."""
        self._callbacks.append(callback)

    async def _notify(self) -> None:
        for callback in self._callbacks:
            try:
                await callback()
            except Exception as e:
                # Keep polling after a failed callback
                log.log_error(f"Refresh callback failed: {e}")

    async def _poll(self) -> None:
        while self._running:
            await asyncio.sleep(self.poll_interval)
            if self._running:
                await self._notify()

    def start(self) -> None:
        """Start ticking."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._poll())

    def stop(self) -> None:
        """Stop ticking."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
