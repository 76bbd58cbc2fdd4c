"""Fixed-interval driver for the health-state monitor."""

from __future__ import annotations

import asyncio
from typing import Optional

from iiot_coordinator.application.use_cases.health_monitor import HealthStateMonitor
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class HealthMonitorRunner:
    """
    Run ``HealthStateMonitor.run_cycle`` every ``interval_seconds``.

    Ticks are aligned to the start time; a cycle that overruns the interval
    causes the missed ticks to be dropped rather than queued.
    """

    def __init__(self, monitor: HealthStateMonitor, interval_seconds: float = 120.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.monitor = monitor
        self.interval_seconds = interval_seconds
        self._stop = asyncio.Event()
        self.cycles_run = 0
        self.ticks_skipped = 0

    def stop(self) -> None:
        self._stop.set()

    async def run(self, max_cycles: Optional[int] = None) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        logger.info("monitor.runner.started", interval_seconds=self.interval_seconds)

        while not self._stop.is_set():
            try:
                await self.monitor.run_cycle()
            except Exception as e:
                # The loop must survive any single failing cycle.
                logger.error("monitor.runner.cycle_failed", error=str(e), exc_info=e)
            self.cycles_run += 1
            if max_cycles is not None and self.cycles_run >= max_cycles:
                break

            next_tick += self.interval_seconds
            now = loop.time()
            if now > next_tick:
                missed = int((now - next_tick) // self.interval_seconds) + 1
                self.ticks_skipped += missed
                next_tick += missed * self.interval_seconds
                logger.warning("monitor.runner.ticks_skipped", missed=missed)

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=next_tick - now)
            except asyncio.TimeoutError:
                pass

        logger.info("monitor.runner.stopped", cycles=self.cycles_run)
