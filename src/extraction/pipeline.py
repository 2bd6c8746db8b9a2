# src/extraction/pipeline.py

"""Layered price extraction: user selectors, common selectors, scan."""

import json
import logging
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.extraction.candidate_collector import (
    CandidateTextCollector,
    PriceCandidate,
)
from src.extraction.document import DocumentQueryAdapter, MarkupParseError
from src.extraction.number_normalizer import (
    NumberNormalizer,
    in_price_range,
    to_western_digits,
)
from src.extraction.scorer import PriceCandidateScorer, ScoredCandidate
from src.models.extraction_result import ExtractionResult, ExtractionStage

logger = logging.getLogger("buying_list.pipeline")

COMMON_PREFIX = "common: "
SCAN_SELECTOR = "fallback: document scan"


def load_selector_config(path: Path | None = None) -> dict[str, Any]:
    """Load the built-in selector and attribute lists."""
    with open(path or Settings.SELECTORS_PATH, encoding="utf-8") as f:
        config: dict[str, Any] = json.load(f)
    return config


class SelectorResolutionPipeline:
    """Resolve one price from raw markup.

    Stages run in order and the first success ends the attempt:

    1. the source's own selectors, in the order configured;
    2. the built-in common selector list;
    3. a scored scan of the whole document text.
    """

    def __init__(
        self,
        common_selectors: list[str] | None = None,
        scorer: PriceCandidateScorer | None = None,
    ) -> None:
        config = load_selector_config()
        self.common_selectors: list[str] = (
            common_selectors
            if common_selectors is not None
            else list(dict.fromkeys(config["common"]))
        )
        self.collector = CandidateTextCollector(
            config["price_attributes"], config["price_tokens"],
        )
        self.scorer = scorer or PriceCandidateScorer()

    def extract(
        self, markup: str, selectors: list[str],
    ) -> ExtractionResult:
        """Run all stages over *markup* and return the outcome."""
        if not markup or not markup.strip():
            return ExtractionResult.failure("Empty or invalid page")
        try:
            document = DocumentQueryAdapter(markup)
        except MarkupParseError as exc:
            logger.warning("Markup could not be parsed: %s", exc)
            return ExtractionResult.failure(f"HTML parse error: {exc}")

        for selector in selectors:
            candidate = self._try_selector(document, selector)
            if candidate is not None:
                logger.debug(
                    "User selector %r matched %s", selector, candidate.price,
                )
                return ExtractionResult(
                    success=True,
                    price=candidate.price,
                    extracted_text=candidate.text,
                    used_selector=selector,
                    stage=ExtractionStage.USER_SELECTOR,
                )

        logger.debug(
            "No user selector matched (%d tried), trying common selectors",
            len(selectors),
        )
        for selector in self.common_selectors:
            candidate = self._try_selector(document, selector)
            if candidate is not None:
                logger.debug(
                    "Common selector %r matched %s",
                    selector,
                    candidate.price,
                )
                return ExtractionResult(
                    success=True,
                    price=candidate.price,
                    extracted_text=candidate.text,
                    used_selector=f"{COMMON_PREFIX}{selector}",
                    stage=ExtractionStage.COMMON_SELECTOR,
                )

        body_text = document.body_text()
        best = self.scan_text(body_text)
        if best is not None:
            logger.debug(
                "Document scan picked %s (confidence %d)",
                best.price,
                best.confidence,
            )
            return ExtractionResult(
                success=True,
                price=best.price,
                extracted_text=best.text,
                used_selector=SCAN_SELECTOR,
                stage=ExtractionStage.DOCUMENT_SCAN,
            )

        excerpt = body_text[:Settings.EXCERPT_LENGTH] + "..."
        return ExtractionResult.failure(
            "No price found with any extraction method",
            extracted_text=excerpt,
        )

    def _try_selector(
        self, document: DocumentQueryAdapter, selector: str,
    ) -> PriceCandidate | None:
        for node in document.resolve(selector):
            candidate = self.collector.collect(node)
            if candidate is not None and in_price_range(candidate.price):
                return candidate
        return None

    def scan_text(self, text: str) -> ScoredCandidate | None:
        """Score every number of the most specific matching pattern."""
        text = to_western_digits(text)
        scored: list[ScoredCandidate] = []
        for match, value in NumberNormalizer.find_candidates(text):
            raw = match.group()
            context = self.scorer.context(text, match.start(), match.end())
            scored.append(ScoredCandidate(
                price=value,
                text=raw,
                position=match.start(),
                confidence=self.scorer.score(raw, value, context),
            ))
        return self.scorer.best(scored)
