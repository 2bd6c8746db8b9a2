# src/services/scheduler.py

"""Periodic price updates across all tracked items."""

import asyncio
import logging

from src.models.extraction_result import BatchUpdateSummary
from src.services.price_service import PriceService

logger = logging.getLogger("buying_list.scheduler")


class ExtractionScheduler:
    """Owns the update timer and spawns one batch update per tick.

    Ticks run as separate tasks so a slow batch never delays the timer.
    Unlike a plain interval timer, a tick that fires while the previous
    batch is still running is skipped instead of starting a second,
    overlapping batch.
    ``stop()`` cancels future ticks only; a batch already running is
    left to finish.
    """

    def __init__(
        self,
        service: PriceService,
        interval_seconds: float | None = None,
    ) -> None:
        self.service = service
        if interval_seconds is None:
            settings = service.store.get_settings()
            interval_seconds = settings.update_interval_ms / 1000
        if interval_seconds <= 0:
            msg = f"Interval must be positive, got {interval_seconds}"
            raise ValueError(msg)
        self.interval_seconds = interval_seconds
        self._timer: asyncio.Task[None] | None = None
        self._batch: asyncio.Task[BatchUpdateSummary] | None = None
        self.last_summary: BatchUpdateSummary | None = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Start ticking; must be called from a running event loop."""
        if self.is_running:
            logger.warning("Scheduler already running")
            return
        self._timer = asyncio.create_task(self._run_loop())
        logger.info(
            "Price scheduler started (every %.0fs)", self.interval_seconds,
        )

    def stop(self) -> None:
        """Cancel future ticks.  An in-flight batch keeps running."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("Price scheduler stopped")

    async def wait_idle(self) -> None:
        """Wait for the in-flight batch, if any, to finish."""
        if self._batch is not None and not self._batch.done():
            await asyncio.wait({self._batch})

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()

    def tick(self) -> None:
        """Spawn one batch update unless the previous one is running."""
        if self._batch is not None and not self._batch.done():
            logger.warning("Previous price update still running, skipping tick")
            return
        self.ticks += 1
        self._batch = asyncio.create_task(self.service.update_all_prices())
        self._batch.add_done_callback(self._on_batch_done)

    def _on_batch_done(
        self, task: "asyncio.Task[BatchUpdateSummary]",
    ) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Scheduled price update failed: %s", exc, exc_info=exc,
            )
            return
        self.last_summary = task.result()
