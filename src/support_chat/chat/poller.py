"""Fixed-interval asyncio poller."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Poller:
    """Runs ``tick`` every ``interval`` seconds until stopped.

    Each tick runs as its own task, so a slow tick does not delay the next
    one and ticks may overlap. ``stop()`` cancels the timer and every tick
    still in flight.

    Args:
        name: Label used in log lines.
        interval: Seconds between ticks.
        tick: Coroutine function called on every tick.
        immediate: Run one tick right away on ``start()``.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[None]],
        immediate: bool = False,
    ):
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._tick = tick
        self._immediate = immediate
        self._loop_task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start ticking. Must be called from a running event loop."""
        if self.running:
            return
        logger.debug(f"Starting poller {self.name} every {self.interval}s")
        self._loop_task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        if self._immediate:
            self._spawn()
        while True:
            await asyncio.sleep(self.interval)
            self._spawn()

    def _spawn(self) -> None:
        task = asyncio.get_running_loop().create_task(self._guarded_tick())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _guarded_tick(self) -> None:
        try:
            await self._tick()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # a failing tick must not end the polling loop
            logger.warning(f"Poller {self.name} tick failed: {e}")

    def stop(self) -> None:
        """Cancel the timer and any ticks still in flight."""
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        for task in list(self._inflight):
            task.cancel()
        self._inflight.clear()
        logger.debug(f"Stopped poller {self.name}")
