# src/extraction/candidate_collector.py

"""Gather price-bearing strings around a resolved node."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from bs4 import Tag

from src.extraction.number_normalizer import NumberNormalizer

logger = logging.getLogger("buying_list.collector")


@dataclass
class PriceCandidate:
    """A parsed price and the raw text it came from."""

    price: Decimal
    text: str
    method: str


class CandidateTextCollector:
    """Try each text source of a node until one parses as a price.

    Order: machine-readable attributes, own text, price-like
    descendants, then the immediate previous and next siblings.
    """

    def __init__(
        self,
        price_attributes: list[str],
        price_tokens: list[str],
    ) -> None:
        self.price_attributes = price_attributes
        self.price_tokens = [t.lower() for t in price_tokens]

    def collect(self, node: Tag) -> PriceCandidate | None:
        """Return the first in-range price found for *node*."""
        methods: list[Callable[[Tag], PriceCandidate | None]] = [
            self._from_attributes,
            self._from_text,
            self._from_descendants,
            self._from_siblings,
        ]
        for method in methods:
            candidate = method(node)
            if candidate is not None:
                return candidate
        return None

    def _from_attributes(self, node: Tag) -> PriceCandidate | None:
        for attr in self.price_attributes:
            raw = node.get(attr)
            if not raw:
                continue
            value = " ".join(raw) if isinstance(raw, list) else str(raw)
            price = NumberNormalizer.parse_price(value)
            if price is not None:
                return PriceCandidate(
                    price, f'[{attr}="{value}"]', "attribute",
                )
        return None

    @staticmethod
    def _from_text(node: Tag) -> PriceCandidate | None:
        text = node.get_text().strip()
        price = NumberNormalizer.parse_price(text)
        if price is not None:
            return PriceCandidate(price, text, "text")
        return None

    def _looks_price_like(self, node: Tag) -> bool:
        classes = node.get("class") or []
        class_str = (
            " ".join(classes) if isinstance(classes, list) else str(classes)
        ).lower()
        names = " ".join(node.attrs).lower()
        return any(
            token in class_str or token in names
            for token in self.price_tokens
        )

    def _from_descendants(self, node: Tag) -> PriceCandidate | None:
        for child in node.find_all(True):
            if not isinstance(child, Tag) or not self._looks_price_like(child):
                continue
            candidate = self._from_text(child)
            if candidate is not None:
                candidate.method = "descendant"
                return candidate
            candidate = self._from_attributes(child)
            if candidate is not None:
                candidate.method = "descendant"
                return candidate
        return None

    def _from_siblings(self, node: Tag) -> PriceCandidate | None:
        for sibling in (
            node.find_previous_sibling(),
            node.find_next_sibling(),
        ):
            if not isinstance(sibling, Tag):
                continue
            candidate = self._from_text(sibling)
            if candidate is not None:
                candidate.method = "sibling"
                return candidate
        return None
