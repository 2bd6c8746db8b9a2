# tests/test_price_analysis.py

"""Tests for comparison, statistics and recommendations."""

import unittest
from datetime import datetime, timedelta
from decimal import Decimal

from src.models.price_analytics import (
    ComparisonSnapshot,
    Decision,
    PriceStatistics,
    SourcePrice,
    Trend,
)
from src.models.shopping_item import PricePoint, ShoppingItem, TrackedSource
from src.services.price_analysis import (
    RecommendationEngine,
    StatisticsEngine,
    build_comparison,
)


def _points(*prices: int) -> list[PricePoint]:
    start = datetime(2026, 1, 1)
    return [
        PricePoint(start + timedelta(hours=i), Decimal(p), "s1")
        for i, p in enumerate(prices)
    ]


def _stats(
    current: str, lowest: str, average: str, trend: Trend,
) -> PriceStatistics:
    return PriceStatistics(
        current=Decimal(current),
        previous=Decimal(current),
        average=Decimal(average),
        lowest=Decimal(lowest),
        highest=Decimal(current),
        trend=trend,
        change_percent=Decimal(0),
        points=3,
    )


def _comparison() -> ComparisonSnapshot:
    return ComparisonSnapshot(
        item_id="item1",
        sources=[SourcePrice("s1", "Shop", Decimal(100), "ر.س", "https://a")],
    )


class TestBuildComparison(unittest.TestCase):
    """Ranking of priced sources."""

    def test_sorted_cheapest_first(self) -> None:
        item = ShoppingItem(id="i", name="Kettle", sources=[
            TrackedSource("a", "https://a", "A", current_price=Decimal(120)),
            TrackedSource("b", "https://b", "B", current_price=Decimal(95)),
            TrackedSource("c", "https://c", "C"),
            TrackedSource(
                "d", "https://d", "D", current_price=Decimal(10), active=False,
            ),
        ])
        comparison = build_comparison(item)
        assert comparison is not None
        self.assertEqual([s.source_id for s in comparison.sources], ["b", "a"])
        self.assertEqual(comparison.best.source_id, "b")
        self.assertEqual(comparison.savings, Decimal(25))

    def test_no_priced_sources(self) -> None:
        item = ShoppingItem(id="i", name="Kettle", sources=[
            TrackedSource("a", "https://a"),
        ])
        self.assertIsNone(build_comparison(item))


class TestStatisticsEngine(unittest.TestCase):
    """Aggregates over a history window."""

    def test_falling_price(self) -> None:
        stats = StatisticsEngine.compute(_points(100, 110, 90))
        assert stats is not None
        self.assertEqual(stats.current, Decimal(90))
        self.assertEqual(stats.previous, Decimal(110))
        self.assertEqual(stats.average, Decimal("100.00"))
        self.assertEqual(stats.lowest, Decimal(90))
        self.assertEqual(stats.highest, Decimal(110))
        self.assertEqual(stats.change_percent, Decimal("-18.18"))
        self.assertEqual(stats.trend, Trend.DOWN)
        self.assertEqual(stats.points, 3)

    def test_single_point_is_stable(self) -> None:
        stats = StatisticsEngine.compute(_points(50))
        assert stats is not None
        self.assertEqual(stats.change_percent, Decimal("0.00"))
        self.assertEqual(stats.trend, Trend.STABLE)

    def test_small_change_is_stable(self) -> None:
        stats = StatisticsEngine.compute(_points(100, 101))
        assert stats is not None
        self.assertEqual(stats.trend, Trend.STABLE)

    def test_rising_price(self) -> None:
        stats = StatisticsEngine.compute(_points(100, 110))
        assert stats is not None
        self.assertEqual(stats.trend, Trend.UP)

    def test_empty(self) -> None:
        self.assertIsNone(StatisticsEngine.compute([]))


class TestRecommendationEngine(unittest.TestCase):
    """Rule order of the buy/wait heuristic."""

    def test_near_low_buys(self) -> None:
        rec = RecommendationEngine.recommend(
            _comparison(), _stats("100", "98", "120", Trend.STABLE),
        )
        self.assertEqual(rec.decision, Decision.BUY)
        self.assertEqual(rec.confidence, 85)
        self.assertEqual(rec.best_source, "Shop")

    def test_below_average_and_falling_buys(self) -> None:
        rec = RecommendationEngine.recommend(
            _comparison(), _stats("90", "70", "100", Trend.DOWN),
        )
        self.assertEqual(rec.decision, Decision.BUY)
        self.assertEqual(rec.confidence, 75)

    def test_rising_waits(self) -> None:
        rec = RecommendationEngine.recommend(
            _comparison(), _stats("140", "100", "100", Trend.UP),
        )
        self.assertEqual(rec.decision, Decision.WAIT)
        self.assertEqual(rec.confidence, 70)

    def test_around_average_is_uncertain(self) -> None:
        rec = RecommendationEngine.recommend(
            _comparison(), _stats("100", "80", "100", Trend.STABLE),
        )
        self.assertEqual(rec.decision, Decision.UNCERTAIN)
        self.assertEqual(rec.confidence, 50)

    def test_no_statistics(self) -> None:
        rec = RecommendationEngine.recommend(_comparison(), None)
        self.assertEqual(rec.decision, Decision.UNCERTAIN)
        self.assertEqual(rec.confidence, 0)
        self.assertEqual(rec.reason, "Insufficient data for analysis")


if __name__ == "__main__":
    unittest.main()
