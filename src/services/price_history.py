# src/services/price_history.py

"""Bounded per-source price history."""

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from src.config.settings import Settings
from src.models.shopping_item import PricePoint

logger = logging.getLogger("buying_list.history")


class PriceHistoryLedger:
    """Append and trim logic for an item's price history list.

    The list mixes points from every source of the item; the retention
    cap applies to each source separately.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit if limit is not None else Settings.HISTORY_LIMIT

    def append(
        self,
        history: list[PricePoint],
        source_id: str,
        price: Decimal,
        timestamp: datetime | None = None,
    ) -> list[PricePoint]:
        """Return *history* with a new point for *source_id*, trimmed."""
        point = PricePoint(
            timestamp=timestamp or datetime.now(),
            price=price,
            source_id=source_id,
        )
        return self.trim([*history, point], source_id)

    def trim(
        self, history: list[PricePoint], source_id: str,
    ) -> list[PricePoint]:
        """Drop the oldest points of *source_id* beyond the cap.

        Points of other sources and the relative order of all kept
        points are preserved.
        """
        own = [p for p in history if p.source_id == source_id]
        excess = len(own) - self.limit
        if excess <= 0:
            return list(history)
        evicted = {
            id(p) for p in sorted(own, key=lambda p: p.timestamp)[:excess]
        }
        logger.debug(
            "Evicting %d old points for source %s", excess, source_id,
        )
        return [p for p in history if id(p) not in evicted]

    @staticmethod
    def window(
        history: list[PricePoint],
        source_id: str | None = None,
        days: int = Settings.STATS_WINDOW_DAYS,
        now: datetime | None = None,
    ) -> list[PricePoint]:
        """Points of *source_id* (or all sources) from the last *days*.

        Returned oldest first.
        """
        cutoff = (now or datetime.now()) - timedelta(days=days)
        selected = [
            p for p in history
            if (source_id is None or p.source_id == source_id)
            and p.timestamp >= cutoff
        ]
        return sorted(selected, key=lambda p: p.timestamp)
