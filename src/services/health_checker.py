# src/services/health_checker.py

"""Connectivity check for every active tracked source."""

import asyncio
import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.shopping_item import TrackedSource
from src.scrapers.page_fetcher import FetchError, PageFetcher
from src.storage.data_store import DataStore

logger = logging.getLogger("buying_list.health")


@dataclass
class HealthResult:
    """Result of a single source health check."""

    source_id: str
    item_name: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_source(
    fetcher: PageFetcher, item_name: str, source: TrackedSource,
) -> HealthResult:
    """Fetch one source page and classify the response."""
    start = time.monotonic()
    try:
        resp = fetcher.fetch(source.url)
    except FetchError as exc:
        return HealthResult(
            source_id=source.id,
            item_name=item_name,
            status="down",
            latency_ms=(time.monotonic() - start) * 1000,
            message=str(exc)[:80],
        )
    elapsed_ms = (time.monotonic() - start) * 1000

    if resp.status != 200:
        return HealthResult(
            source.id, item_name, "down", elapsed_ms,
            f"HTTP {resp.status}",
        )
    if fetcher.is_challenge_page(resp.body):
        return HealthResult(
            source.id, item_name, "down", elapsed_ms, "Challenge page",
        )
    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return HealthResult(
            source.id, item_name, "slow", elapsed_ms, "High latency",
        )
    return HealthResult(source.id, item_name, "ok", elapsed_ms, "")


class HealthChecker:
    """Runs concurrent probes against all active sources."""

    def __init__(
        self, store: DataStore, fetcher: PageFetcher | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher or PageFetcher(
            timeout=Settings.HEALTH_TIMEOUT
        )

    async def check_all(self) -> list[HealthResult]:
        """Probe every active source concurrently."""
        tasks = [
            asyncio.to_thread(probe_source, self.fetcher, item.name, src)
            for item in self.store.get_items()
            for src in item.sources
            if src.active
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s (%s): %s (%.0fms) %s",
                r.source_id,
                r.item_name,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
