"""Periodic maintenance sweeps (expired jobs, stale rate-limit windows).

Each sweep runs on its own asyncio task, started and stopped by the owning
service's lifecycle instead of at import time.
"""

import asyncio
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class PeriodicSweeper:
    """Call ``sweep`` every ``interval`` seconds until stopped.

    A failing sweep is logged and retried on the next tick.
    """

    def __init__(self, name: str, interval: float, sweep: Callable[[], int]) -> None:
        self.name = name
        self.interval = interval
        self.sweep = sweep
        self._task: asyncio.Task | None = None
        self._log = logger.bind(sweeper=name)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name=f"sweeper-{self.name}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        self._log.info("sweeper_started", interval=self.interval)

        while True:
            await asyncio.sleep(self.interval)
            self.run_once()

    def run_once(self) -> int:
        """Run one sweep. Returns items removed (0 if the sweep raised)."""
        try:
            removed = self.sweep()
        except Exception as exc:
            self._log.error("sweep_failed", error=str(exc), error_type=type(exc).__name__, exc_info=True)
            return 0

        if removed:
            self._log.info("sweep_complete", removed=removed)
        return removed
