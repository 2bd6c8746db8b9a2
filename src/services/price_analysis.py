# src/services/price_analysis.py

"""Comparison, statistics and buy/wait recommendation over history."""

import logging
from decimal import Decimal

from src.config.settings import Settings
from src.models.price_analytics import (
    ComparisonSnapshot,
    Decision,
    PriceStatistics,
    Recommendation,
    SourcePrice,
    Trend,
)
from src.models.shopping_item import PricePoint, ShoppingItem

logger = logging.getLogger("buying_list.analysis")

_CENT = Decimal("0.01")
_HUNDRED = Decimal(100)


def build_comparison(item: ShoppingItem) -> ComparisonSnapshot | None:
    """Rank the item's active, priced sources by ascending price."""
    rows = [
        SourcePrice(
            source_id=s.id,
            name=s.name,
            price=s.current_price,
            currency=s.currency,
            url=s.url,
        )
        for s in item.sources
        if s.active and s.current_price is not None
    ]
    if not rows:
        return None
    rows.sort(key=lambda r: r.price)
    return ComparisonSnapshot(item_id=item.id, sources=rows)


class StatisticsEngine:
    """Aggregates over one source's windowed history."""

    @staticmethod
    def compute(points: list[PricePoint]) -> PriceStatistics | None:
        """Statistics for chronologically ordered *points*.

        Returns ``None`` for an empty window.
        """
        if not points:
            return None
        prices = [p.price for p in points]
        current = prices[-1]
        previous = prices[-2] if len(prices) > 1 else current

        average = sum(prices, Decimal(0)) / len(prices)
        change = (
            (current - previous) / previous * _HUNDRED
            if previous > 0
            else Decimal(0)
        )

        trend = Trend.STABLE
        if change > Settings.TREND_THRESHOLD:
            trend = Trend.UP
        elif change < -Settings.TREND_THRESHOLD:
            trend = Trend.DOWN

        return PriceStatistics(
            current=current,
            previous=previous,
            average=average.quantize(_CENT),
            lowest=min(prices),
            highest=max(prices),
            trend=trend,
            change_percent=change.quantize(_CENT),
            points=len(prices),
        )


class RecommendationEngine:
    """Heuristic buy/wait decision from comparison plus statistics.

    Rules are checked in order and the first match wins:

    * near the historical low (within 5%) and not rising: buy, 85
    * at least 10% under average and falling: buy, 75
    * 15% or more over average, or rising: wait, 70
    * otherwise: uncertain, 50
    """

    @staticmethod
    def recommend(
        comparison: ComparisonSnapshot,
        stats: PriceStatistics | None,
    ) -> Recommendation:
        best_name = comparison.best.name or comparison.best.source_id
        if stats is None:
            return Recommendation(
                decision=Decision.UNCERTAIN,
                confidence=0,
                reason="Insufficient data for analysis",
                best_source=best_name,
            )

        vs_lowest = _percent_over(stats.current, stats.lowest)
        vs_average = _percent_over(stats.current, stats.average)

        if vs_lowest <= 5 and stats.trend is not Trend.UP:
            decision, confidence = Decision.BUY, 85
            reason = "Price is near its historical low and not rising"
        elif vs_average <= -10 and stats.trend is Trend.DOWN:
            decision, confidence = Decision.BUY, 75
            reason = "Price is below average and trending down"
        elif vs_average >= 15 or stats.trend is Trend.UP:
            decision, confidence = Decision.WAIT, 70
            reason = "Price is high compared to average or trending up"
        else:
            decision, confidence = Decision.UNCERTAIN, 50
            reason = "Price is around average, buy if you need it"

        logger.debug(
            "Recommendation %s (vs_lowest=%.2f%%, vs_average=%.2f%%)",
            decision.value,
            vs_lowest,
            vs_average,
        )
        return Recommendation(
            decision=decision,
            confidence=confidence,
            reason=reason,
            best_source=best_name,
        )


def _percent_over(value: Decimal, reference: Decimal) -> Decimal:
    if reference == 0:
        return Decimal(0)
    return (value - reference) / reference * _HUNDRED
