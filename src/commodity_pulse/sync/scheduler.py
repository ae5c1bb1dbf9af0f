"""Periodic refresh driver with cooperative cancellation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class RefreshScheduler:
    """Calls ``refresh`` every ``interval`` seconds until stopped.

    The wait is interruptible: ``stop()`` wakes a sleeping loop at once.
    A refresh already running when ``stop()`` is called is left to finish;
    no new one starts afterwards.

    Parameters
    ----------
    refresh : Callable[[], Awaitable[None]]
        Usually ``QuoteSyncCoordinator.refresh``. The scheduler never
        touches state itself.
    interval : float
        Seconds between the end of one wait and the start of the next.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]],
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._refresh = refresh
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        """Begin the refresh loop. Idempotent while running."""
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        logger.info("Auto-refresh started (every %.0fs)", self._interval)

    def stop(self) -> asyncio.Task[None] | None:
        """Signal the loop to exit and drop the handle.

        Returns the loop task so callers may await its exit; the task is
        not cancelled.
        """
        task = self._task
        if self._stop_event is not None:
            self._stop_event.set()
        self._task = None
        self._stop_event = None
        if task is not None:
            logger.info("Auto-refresh stopped")
        return task

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                return
            try:
                await self._refresh()
            except Exception:
                logger.exception("Scheduled refresh failed")
