# src/models/price_analytics.py

"""Derived, read-only views over an item's committed price state."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class Trend(str, Enum):
    """Coarse direction of the latest price movement."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Decision(str, Enum):
    """Buy/wait outcome of the recommendation heuristic."""

    BUY = "buy"
    WAIT = "wait"
    UNCERTAIN = "uncertain"


@dataclass
class SourcePrice:
    """One row of a comparison: a source and its current price."""

    source_id: str
    name: str
    price: Decimal
    currency: str
    url: str


@dataclass
class ComparisonSnapshot:
    """Active priced sources of an item, cheapest first."""

    item_id: str
    sources: list[SourcePrice] = field(
        default_factory=lambda: list[SourcePrice]()
    )

    @property
    def best(self) -> SourcePrice:
        return self.sources[0]

    @property
    def worst(self) -> SourcePrice:
        return self.sources[-1]

    @property
    def savings(self) -> Decimal:
        """Difference between the worst and the best price."""
        return self.worst.price - self.best.price


@dataclass
class PriceStatistics:
    """Aggregates over a source's history inside a trailing window."""

    current: Decimal
    previous: Decimal
    average: Decimal
    lowest: Decimal
    highest: Decimal
    trend: Trend
    change_percent: Decimal
    points: int


@dataclass
class Recommendation:
    """Buy/wait/uncertain decision for an item."""

    decision: Decision
    confidence: int
    reason: str
    best_source: str = ""
