"""Fixed-delay background loop with a Stopped/Running state machine."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class PeriodicService(ABC):
    """
    Runs ``run_cycle()`` repeatedly, waiting ``interval`` seconds *after* each
    cycle completes, so two cycles of the same service never overlap.

    ``start()`` while running and ``stop()`` while stopped are no-ops.
    ``stop()`` only prevents the next cycle; one already in flight finishes.
    A restart waits for the previous loop to wind down before its first cycle.
    """

    name = "periodic"

    def __init__(self, interval_seconds: float, initial_delay: float = 0.0):
        self._interval = float(interval_seconds)
        self._initial_delay = float(initial_delay)
        self._task: asyncio.Task | None = None
        self._wake: asyncio.Event | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Start the loop (no-op when already running)."""
        if self._running:
            logger.info("%s already running", self.name)
            return
        self._interval = await self._resolve_interval()
        self._running = True
        self._wake = asyncio.Event()
        # Startup delay applies to the first start only
        delay, self._initial_delay = self._initial_delay, 0.0
        previous = self._task
        self._task = asyncio.create_task(self._run_loop(previous, self._wake, delay), name=self.name)
        logger.info("%s started (interval: %.1fs)", self.name, self._interval)

    def stop(self) -> None:
        """Prevent further cycles (no-op when already stopped)."""
        if not self._running:
            logger.info("%s not running", self.name)
            return
        self._halt()
        logger.info("%s stopped", self.name)

    async def shutdown(self, timeout: float = 10.0) -> None:
        """Stop and wait for the in-flight cycle, cancelling it after ``timeout``."""
        if self._running:
            self._halt()
        task, self._task = self._task, None
        if task is None or task.done():
            return
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning("%s did not finish within %.0fs — cancelling", self.name, timeout)
            task.cancel()
            await asyncio.wait({task})

    @abstractmethod
    async def run_cycle(self) -> object:
        """One iteration of the loop body."""

    async def _resolve_interval(self) -> float:
        """Interval to use for the run being started."""
        return self._interval

    def _halt(self) -> None:
        self._running = False
        if self._wake is not None:
            self._wake.set()

    async def _run_loop(
        self, previous: asyncio.Task | None, wake: asyncio.Event, delay: float = 0.0
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})

        if delay > 0 and await self._sleep(wake, delay):
            return

        while not wake.is_set():
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("%s cycle failed", self.name)
            if await self._sleep(wake, self._interval):
                break

    @staticmethod
    async def _sleep(wake: asyncio.Event, seconds: float) -> bool:
        """Sleep up to ``seconds``; True when woken by stop()."""
        try:
            await asyncio.wait_for(wake.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True
