# src/services/price_service.py

"""Price updates, alerts and read-side analytics for tracked items."""

import asyncio
import logging
import weakref
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.config.settings import Settings
from src.extraction.number_normalizer import in_price_range
from src.extraction.pipeline import SelectorResolutionPipeline
from src.models.extraction_result import BatchUpdateSummary, ExtractionResult
from src.models.price_analytics import (
    ComparisonSnapshot,
    PriceStatistics,
    Recommendation,
)
from src.models.shopping_item import (
    AlertCondition,
    PriceAlert,
    PricePoint,
    TrackedSource,
)
from src.scrapers.page_fetcher import FetchError, PageFetcher
from src.services.alert_evaluator import AlertEvaluator, NotificationRequest
from src.services.notifier import ConsoleNotifier, Notifier
from src.services.price_analysis import (
    RecommendationEngine,
    StatisticsEngine,
    build_comparison,
)
from src.services.price_history import PriceHistoryLedger
from src.storage.data_store import DataStore, new_id

logger = logging.getLogger("buying_list.price_service")


class PriceService:
    """Coordinates fetching, extraction, persistence and alerts.

    Every read-modify-write of an item runs under that item's lock, so
    concurrent updates of two sources of the same item cannot overwrite
    each other.  Fetching and extraction happen outside the lock.
    """

    def __init__(
        self,
        store: DataStore,
        fetcher: PageFetcher | None = None,
        pipeline: SelectorResolutionPipeline | None = None,
        notifier: Notifier | None = None,
        ledger: PriceHistoryLedger | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher or PageFetcher()
        self.pipeline = pipeline or SelectorResolutionPipeline()
        self.notifier: Notifier = notifier or ConsoleNotifier()
        self.ledger = ledger or PriceHistoryLedger()
        # Entries vanish once no coroutine holds or waits on the lock
        self._item_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, item_id: str) -> asyncio.Lock:
        lock = self._item_locks.get(item_id)
        if lock is None:
            lock = asyncio.Lock()
            self._item_locks[item_id] = lock
        return lock

    async def _persist(self, item_id: str, **fields: Any) -> bool:
        """Write *fields* of an item to the store off the event loop."""
        return await asyncio.to_thread(
            self.store.update_item, item_id, **fields,
        )

    # ── Extraction ───────────────────────────────────────

    async def update_source_price(
        self, item_id: str, source_id: str,
    ) -> ExtractionResult:
        """Fetch, extract and commit the current price of one source."""
        item = self.store.get_item(item_id)
        if item is None:
            return ExtractionResult.failure(
                "Item not found", source_id=source_id,
            )
        source = item.find_source(source_id)
        if source is None:
            return ExtractionResult.failure(
                "Source not found", source_id=source_id,
            )

        result = await self._scrape(source)
        result.source_id = source_id
        if not result.success or result.price is None:
            logger.info(
                "No price for %s/%s: %s",
                item.name,
                source.name or source.id,
                result.error,
            )
            return result
        return await self._commit(item_id, source_id, result)

    async def _scrape(self, source: TrackedSource) -> ExtractionResult:
        try:
            response = await asyncio.to_thread(
                self.fetcher.fetch, source.url,
            )
        except FetchError as exc:
            return ExtractionResult.failure(f"Network error: {exc}")

        if response.status != 200:
            detail = response.body[:100].strip() or "Unable to fetch page"
            return ExtractionResult.failure(
                f"HTTP {response.status}: {detail}"
            )
        if len(response.body.strip()) < Settings.MIN_MARKUP_LENGTH:
            return ExtractionResult.failure("Empty or invalid page")
        if self.fetcher.is_challenge_page(response.body):
            return ExtractionResult.failure("Blocked by a challenge page")

        return await asyncio.to_thread(
            self.pipeline.extract, response.body, source.selectors,
        )

    async def _commit(
        self, item_id: str, source_id: str, result: ExtractionResult,
    ) -> ExtractionResult:
        price = result.price
        if price is None:
            return result
        requests: list[NotificationRequest] = []

        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            source = item.find_source(source_id) if item else None
            if item is None or source is None:
                return ExtractionResult.failure(
                    "Source removed during update", source_id=source_id,
                )
            if source.current_price == price:
                logger.debug(
                    "Price unchanged for %s/%s at %s",
                    item.name,
                    source.id,
                    price,
                )
                return result

            previous = source.current_price
            source.current_price = price
            source.last_updated = datetime.now()
            item.price_history = self.ledger.append(
                item.price_history, source_id, price,
            )
            requests = AlertEvaluator.evaluate(item, source, price)
            await self._persist(
                item_id,
                sources=item.sources,
                price_history=item.price_history,
                alerts=item.alerts,
            )
            logger.info(
                "Price for %s/%s changed %s -> %s (%s)",
                item.name,
                source.name or source.id,
                previous,
                price,
                result.used_selector,
            )

        result.changed = True
        self._dispatch(requests)
        return result

    def _dispatch(self, requests: list[NotificationRequest]) -> None:
        if not requests:
            return
        if not self.store.get_settings().notifications_enabled:
            logger.debug(
                "Notifications disabled, %d alert(s) not shown",
                len(requests),
            )
            return
        for request in requests:
            try:
                self.notifier.notify(request)
            except Exception as exc:
                logger.error(
                    "Notifier failed for %s: %s",
                    request.item_name,
                    exc,
                    exc_info=True,
                )

    async def update_all_prices(self) -> BatchUpdateSummary:
        """Update every active source of every item concurrently."""
        targets = [
            (item.id, source.id)
            for item in self.store.get_items()
            for source in item.sources
            if source.active
        ]
        summary = BatchUpdateSummary(total=len(targets))
        if not targets:
            return summary

        outcomes = await asyncio.gather(
            *(self.update_source_price(i, s) for i, s in targets),
            return_exceptions=True,
        )
        for (item_id, source_id), outcome in zip(targets, outcomes):
            if isinstance(outcome, ExtractionResult) and outcome.success:
                summary.succeeded += 1
                continue
            summary.failed += 1
            if isinstance(outcome, BaseException):
                logger.error(
                    "Update of %s/%s raised: %s",
                    item_id,
                    source_id,
                    outcome,
                    exc_info=outcome,
                )

        logger.info(
            "Batch update finished: %d ok, %d failed of %d",
            summary.succeeded,
            summary.failed,
            summary.total,
        )
        return summary

    async def manual_price_update(
        self, item_id: str, source_id: str, price: Decimal,
    ) -> bool:
        """Record a price entered by the user.

        Returns ``False`` for unknown ids or an out-of-range price.
        Alerts are not evaluated for manual entries.
        """
        if not in_price_range(price):
            return False
        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            source = item.find_source(source_id) if item else None
            if item is None or source is None:
                return False
            if source.current_price == price:
                return True
            source.current_price = price
            source.last_updated = datetime.now()
            item.price_history = self.ledger.append(
                item.price_history, source_id, price,
            )
            await self._persist(
                item_id,
                sources=item.sources,
                price_history=item.price_history,
            )
        logger.info(
            "Manual price %s recorded for %s/%s", price, item_id, source_id,
        )
        return True

    async def add_source(
        self, item_id: str, source: TrackedSource,
    ) -> TrackedSource | None:
        """Attach a new source to an item."""
        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            if item is None:
                return None
            source.id = source.id or new_id("src")
            item.sources.append(source)
            await self._persist(item_id, sources=item.sources)
        return source

    # ── Alerts ───────────────────────────────────────────

    async def add_alert(
        self,
        item_id: str,
        source_id: str,
        target_price: Decimal,
        condition: AlertCondition,
    ) -> PriceAlert | None:
        """Create an active alert on one of the item's sources."""
        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            if item is None or item.find_source(source_id) is None:
                return None
            alert = PriceAlert(
                id=new_id("alert"),
                source_id=source_id,
                target_price=target_price,
                condition=condition,
            )
            item.alerts.append(alert)
            await self._persist(item_id, alerts=item.alerts)
        return alert

    async def remove_alert(self, item_id: str, alert_id: str) -> bool:
        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            if item is None:
                return False
            kept = [a for a in item.alerts if a.id != alert_id]
            if len(kept) == len(item.alerts):
                return False
            await self._persist(item_id, alerts=kept)
        return True

    async def toggle_alert(
        self, item_id: str, alert_id: str,
    ) -> bool | None:
        """Flip an alert's active flag; returns the new state."""
        async with self._lock_for(item_id):
            item = self.store.get_item(item_id)
            if item is None:
                return None
            for alert in item.alerts:
                if alert.id == alert_id:
                    alert.active = not alert.active
                    await self._persist(item_id, alerts=item.alerts)
                    return alert.active
        return None

    # ── Reads ────────────────────────────────────────────

    def get_comparison(self, item_id: str) -> ComparisonSnapshot | None:
        item = self.store.get_item(item_id)
        if item is None:
            return None
        return build_comparison(item)

    def get_history(
        self,
        item_id: str,
        source_id: str | None = None,
        days: int = Settings.STATS_WINDOW_DAYS,
    ) -> list[PricePoint]:
        """History points of the item from the last *days*, oldest first."""
        item = self.store.get_item(item_id)
        if item is None:
            return []
        return PriceHistoryLedger.window(item.price_history, source_id, days)

    def get_statistics(
        self, item_id: str, source_id: str,
    ) -> PriceStatistics | None:
        return StatisticsEngine.compute(
            self.get_history(item_id, source_id)
        )

    def get_recommendation(self, item_id: str) -> Recommendation | None:
        comparison = self.get_comparison(item_id)
        if comparison is None:
            return None
        stats = self.get_statistics(item_id, comparison.best.source_id)
        return RecommendationEngine.recommend(comparison, stats)

    def close(self) -> None:
        self.fetcher.close()
