# src/extraction/scorer.py

"""Confidence scoring for numbers found by the full-document scan."""

import re
from dataclasses import dataclass
from decimal import Decimal

from src.config.settings import Settings

# English and Arabic price words, currency names and symbols
PRICE_KEYWORDS: list[str] = [
    "price",
    "cost",
    "amount",
    "total",
    "سعر",
    "تكلفة",
    "مبلغ",
    "إجمالي",
    "ريال",
    "دولار",
    "جنيه",
    "درهم",
    "دينار",
    "ر.س",
    "$",
    "€",
    "£",
]

_STRICT_FORMAT_RE = re.compile(r"[0-9]{1,3}(,[0-9]{3})*\.[0-9]{2}")
_TWO_DECIMALS_RE = re.compile(r"[0-9]+\.[0-9]{2}$")

BASE_CONFIDENCE = 50
KEYWORD_BONUS = 15
STRICT_FORMAT_BONUS = 20
TWO_DECIMALS_BONUS = 10
LENGTH_BONUS = 10
MAGNITUDE_PENALTY = 20


@dataclass
class ScoredCandidate:
    """A scanned number with its confidence score."""

    price: Decimal
    text: str
    position: int
    confidence: int


class PriceCandidateScorer:
    """Rate how likely a scanned number is the page's actual price."""

    def __init__(self, radius: int | None = None) -> None:
        self.radius = (
            radius if radius is not None else Settings.CONTEXT_RADIUS
        )

    def context(self, text: str, start: int, end: int) -> str:
        """Text window of ``radius`` characters around ``text[start:end]``."""
        return text[max(0, start - self.radius):end + self.radius]

    def score(
        self, raw: str, value: Decimal, context: str,
    ) -> int:
        """Score one candidate, clamped to 0..100."""
        confidence = BASE_CONFIDENCE

        lowered = context.lower()
        for keyword in PRICE_KEYWORDS:
            if keyword in lowered:
                confidence += KEYWORD_BONUS

        if _STRICT_FORMAT_RE.search(raw):
            confidence += STRICT_FORMAT_BONUS
        if _TWO_DECIMALS_RE.search(raw):
            confidence += TWO_DECIMALS_BONUS
        if 4 <= len(raw) <= 10:
            confidence += LENGTH_BONUS

        if value < Settings.PLAUSIBLE_MIN or value > Settings.PLAUSIBLE_MAX:
            confidence -= MAGNITUDE_PENALTY

        return max(0, min(100, confidence))

    def best(
        self, candidates: list[ScoredCandidate],
    ) -> ScoredCandidate | None:
        """Highest confidence wins; ties go to the earliest position."""
        if not candidates:
            return None
        ordered = sorted(candidates, key=lambda c: c.position)
        return max(ordered, key=lambda c: c.confidence)
