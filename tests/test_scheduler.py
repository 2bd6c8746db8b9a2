# tests/test_scheduler.py

"""Tests for the periodic price update scheduler."""

import asyncio
import unittest
from unittest.mock import MagicMock

from src.models.extraction_result import BatchUpdateSummary
from src.models.user_settings import UserSettings
from src.services.scheduler import ExtractionScheduler


class _FakeService:
    """Counts batch updates; each one waits on ``gate`` when set."""

    def __init__(self) -> None:
        self.store = MagicMock()
        self.store.get_settings.return_value = UserSettings(
            update_interval_ms=120_000,
        )
        self.runs = 0
        self.gate: asyncio.Event | None = None

    async def update_all_prices(self) -> BatchUpdateSummary:
        self.runs += 1
        if self.gate is not None:
            await self.gate.wait()
        return BatchUpdateSummary(total=1, succeeded=1)


class TestExtractionScheduler(unittest.IsolatedAsyncioTestCase):
    """Tick, overlap and stop behaviour."""

    def setUp(self) -> None:
        self.service = _FakeService()

    def test_interval_from_settings(self) -> None:
        scheduler = ExtractionScheduler(self.service)  # type: ignore[arg-type]
        self.assertEqual(scheduler.interval_seconds, 120)

    def test_rejects_non_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            ExtractionScheduler(self.service, 0)  # type: ignore[arg-type]

    async def test_tick_runs_batch(self) -> None:
        scheduler = ExtractionScheduler(self.service, 60)  # type: ignore[arg-type]
        scheduler.tick()
        await scheduler.wait_idle()
        await asyncio.sleep(0)
        self.assertEqual(self.service.runs, 1)
        self.assertEqual(
            scheduler.last_summary, BatchUpdateSummary(1, 1, 0),
        )

    async def test_overlapping_tick_is_skipped(self) -> None:
        self.service.gate = asyncio.Event()
        scheduler = ExtractionScheduler(self.service, 60)  # type: ignore[arg-type]
        scheduler.tick()
        await asyncio.sleep(0)
        scheduler.tick()
        self.assertEqual(scheduler.ticks, 1)

        self.service.gate.set()
        await scheduler.wait_idle()
        self.assertEqual(self.service.runs, 1)

    async def test_timer_ticks_until_stopped(self) -> None:
        scheduler = ExtractionScheduler(self.service, 0.01)  # type: ignore[arg-type]
        scheduler.start()
        self.assertTrue(scheduler.is_running)
        await asyncio.sleep(0.05)
        scheduler.stop()
        self.assertFalse(scheduler.is_running)
        await scheduler.wait_idle()

        runs = self.service.runs
        self.assertGreaterEqual(runs, 1)
        await asyncio.sleep(0.03)
        self.assertEqual(self.service.runs, runs)

    async def test_stop_leaves_running_batch(self) -> None:
        self.service.gate = asyncio.Event()
        scheduler = ExtractionScheduler(self.service, 60)  # type: ignore[arg-type]
        scheduler.start()
        scheduler.tick()
        await asyncio.sleep(0)
        scheduler.stop()

        self.service.gate.set()
        await scheduler.wait_idle()
        await asyncio.sleep(0)
        self.assertIsNotNone(scheduler.last_summary)


if __name__ == "__main__":
    unittest.main()
