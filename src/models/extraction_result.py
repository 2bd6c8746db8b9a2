# src/models/extraction_result.py

"""Outcome of one price extraction attempt."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ExtractionStage(str, Enum):
    """Pipeline stage that produced (or failed to produce) a price."""

    USER_SELECTOR = "user"
    COMMON_SELECTOR = "common"
    DOCUMENT_SCAN = "scan"
    NONE = "none"


@dataclass
class ExtractionResult:
    """Transient result of extracting a price for one source.

    ``extracted_text``, ``used_selector`` and ``error`` are diagnostics
    only; nothing but ``price`` is written back to the source.
    """

    success: bool
    price: Decimal | None = None
    extracted_text: str = ""
    used_selector: str = ""
    error: str = ""
    stage: ExtractionStage = ExtractionStage.NONE
    source_id: str = ""
    changed: bool = False

    @classmethod
    def failure(
        cls,
        error: str,
        extracted_text: str = "",
        source_id: str = "",
    ) -> "ExtractionResult":
        """Build a failed result carrying a human-readable reason."""
        return cls(
            success=False,
            error=error,
            extracted_text=extracted_text,
            source_id=source_id,
        )


@dataclass
class BatchUpdateSummary:
    """Success/failure tally of one ``update_all_prices`` run."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
