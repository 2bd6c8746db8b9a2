# src/extraction/number_normalizer.py

"""Multi-locale numeric normalisation for scraped price strings.

Handles Arabic-Indic digits, the Arabic decimal separator (``٫``), US
grouping (``1,234.56``), European grouping (``1.234,56``), space
grouping (``1 234.56``) and bare numbers.  The separator precedence in
:meth:`NumberNormalizer.normalize` decides ambiguous inputs such as
``1,234`` versus ``12,34`` and must stay in this order.
"""

import logging
import re
from decimal import Decimal, InvalidOperation

from src.config.settings import Settings

logger = logging.getLogger("buying_list.normalizer")

ARABIC_DECIMAL = "٫"

# Arabic-Indic (U+0660..) and Extended Arabic-Indic (U+06F0..) digits
_DIGIT_TABLE: dict[int, str] = {
    **{0x0660 + i: str(i) for i in range(10)},
    **{0x06F0 + i: str(i) for i in range(10)},
}

_NOISE_RE = re.compile(r"[^0-9.,٫\s]")

# Most specific first.  The first pattern with an in-range match wins.
PRICE_PATTERNS: list[re.Pattern[str]] = [
    # Decimal with thousands groups: 1,234.56 / 1 234.56
    re.compile(r"(?<![0-9])[0-9]{1,3}(?:[,\s][0-9]{3})*\.[0-9]{2}(?![0-9])"),
    # Arabic decimal separator: 1,234٫56
    re.compile(r"(?<![0-9])[0-9]{1,3}(?:[,\s][0-9]{3})*٫[0-9]{2}(?![0-9])"),
    # European: 1.234,56
    re.compile(r"(?<![0-9])[0-9]{1,3}(?:[.\s][0-9]{3})*,[0-9]{2}(?![0-9])"),
    # Grouped integers: 1,234 / 1.234.567
    re.compile(r"(?<![0-9])[0-9]{1,3}(?:[,\s.][0-9]{3})+(?![0-9])"),
    # Simple decimals: 1234.5 / 12,34 / 99٫9
    re.compile(r"(?<![0-9])[0-9]+[.,٫][0-9]{1,2}(?![0-9])"),
    # Long digit runs
    re.compile(r"(?<![0-9])[0-9]{4,}(?![0-9])"),
    # Any digits
    re.compile(r"[0-9]+"),
]

_TWO_PLACES = Decimal("0.01")


def to_western_digits(text: str) -> str:
    """Map Arabic-Indic digits to ASCII digits."""
    return text.translate(_DIGIT_TABLE)


def in_price_range(value: Decimal) -> bool:
    """True when *value* passes the price sanity bounds."""
    return Settings.MIN_PRICE <= value <= Settings.MAX_PRICE


class NumberNormalizer:
    """Turn raw numeric text into canonical :class:`Decimal` values."""

    @staticmethod
    def normalize(raw: str) -> Decimal | None:
        """Normalise a single numeric token.

        Returns ``None`` when no digits are left after cleaning.
        """
        if not raw:
            return None
        text = to_western_digits(raw)
        text = _NOISE_RE.sub("", text)
        text = re.sub(r"\s+", "", text).strip(".,")
        if not re.search(r"[0-9]", text):
            return None

        if ARABIC_DECIMAL in text:
            head, _, tail = text.rpartition(ARABIC_DECIMAL)
            head = re.sub(r"[,.٫]", "", head)
            tail = re.sub(r"[,.]", "", tail)
            text = f"{head}.{tail}" if tail else head
        elif "," in text and "." in text:
            if text.rfind(".") > text.rfind(","):
                text = text.replace(",", "")
            else:
                text = text.replace(".", "").replace(",", ".")
        elif "," in text:
            head, _, tail = text.rpartition(",")
            if 1 <= len(tail) <= 2 and tail.isdigit():
                text = head.replace(",", "") + "." + tail
            else:
                text = text.replace(",", "")
        elif text.count(".") > 1:
            text = text.replace(".", "")

        try:
            return Decimal(text)
        except InvalidOperation:
            logger.debug("Unparseable numeric token %r", raw)
            return None

    @classmethod
    def find_candidates(
        cls, text: str,
    ) -> list[tuple[re.Match[str], Decimal]]:
        """Return in-range matches of the most specific pattern that has any.

        *text* must already use Western digits.  Patterns are never
        combined: once one yields an in-range value, less specific
        patterns are not tried.
        """
        for pattern in PRICE_PATTERNS:
            found: list[tuple[re.Match[str], Decimal]] = []
            for match in pattern.finditer(text):
                value = cls.normalize(match.group())
                if value is not None and in_price_range(value):
                    found.append((match, value))
            if found:
                return found
        return []

    @classmethod
    def parse_price(cls, text: str | None) -> Decimal | None:
        """Extract one price from free text such as ``'1,299.00 ر.س'``.

        When the winning pattern matches several values, the largest
        one with at most two decimal places is preferred.
        """
        if not text:
            return None
        cleaned = _NOISE_RE.sub(" ", to_western_digits(text))
        values = [value for _, value in cls.find_candidates(cleaned)]
        if not values:
            return None
        if len(values) > 1:
            retail = [
                v for v in values if v == v.quantize(_TWO_PLACES)
            ]
            if retail:
                return max(retail)
        return max(values)
