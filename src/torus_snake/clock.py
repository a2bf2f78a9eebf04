"""Cancellable asyncio interval clock."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TickClock:
    """Calls *callback* once per interval on the running event loop.

    At most one timer task exists per clock. :meth:`reschedule` replaces
    the running timer rather than adding a second one, and a generation
    counter ensures a stopped or replaced timer never fires again, even
    if its task has not yet observed the cancellation.
    """

    def __init__(self, callback: Callable[[], None], name: str = "tick-clock") -> None:
        self.callback = callback
        self.name = name
        self.interval: float | None = None
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self, interval: float) -> None:
        """Start ticking every *interval* seconds."""
        if interval <= 0:
            raise ValueError("Clock interval must be positive.")
        self.stop()
        self._generation += 1
        self.interval = interval
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, interval), name=self.name,
        )
        logger.debug("Clock %s started at %.4fs.", self.name, interval)

    def reschedule(self, interval: float) -> None:
        """Switch to a new interval; the next tick comes a full interval later."""
        self.start(interval)

    def stop(self) -> None:
        """Cancel the timer. Safe to call when not running."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, generation: int, interval: float) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                if generation != self._generation:
                    return
                self.callback()
        except asyncio.CancelledError:
            logger.debug("Clock %s cancelled.", self.name)
        except Exception:
            logger.exception("Clock %s callback failed.", self.name)
            if generation == self._generation:
                self._task = None
