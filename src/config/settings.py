# src/config/settings.py

"""Central configuration for the buying_list price tracker."""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the buying_list price tracker."""

    # --- Fetching ---
    REQUEST_TIMEOUT: int = int(
        os.getenv("BUYING_LIST_REQUEST_TIMEOUT", "15")
    )                                   # Seconds before a fetch times out
    MIN_MARKUP_LENGTH: int = 100        # Shorter pages count as empty
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Edge/120.0.0.0"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.0 Safari/605.1.15"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) "
            "Gecko/20100101 Firefox/121.0"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "ar,en-US;q=0.9,en;q=0.8",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Cache-Control": "max-age=0",
    }
    CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    # --- Extraction ---
    MIN_PRICE: Decimal = Decimal("0.01")
    MAX_PRICE: Decimal = Decimal("1000000")
    PLAUSIBLE_MIN: Decimal = Decimal("1")       # Scorer penalty below
    PLAUSIBLE_MAX: Decimal = Decimal("100000")  # Scorer penalty above
    CONTEXT_RADIUS: int = 50            # Chars around a scanned candidate
    EXCERPT_LENGTH: int = 200           # Diagnostic text on failure

    # --- History / analytics ---
    HISTORY_LIMIT: int = 100            # Points kept per source
    STATS_WINDOW_DAYS: int = 30
    TREND_THRESHOLD: Decimal = Decimal("1")     # Percent

    # --- User setting defaults ---
    DEFAULT_UPDATE_INTERVAL_MS: int = 3_600_000  # 1 hour
    DEFAULT_CURRENCY: str = "ر.س"
    DATA_VERSION: str = "1.0.0"

    # --- Health check ---
    HEALTH_TIMEOUT: int = 10
    HEALTH_SLOW_MS: float = 5000.0

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_DIR: Path = Path(
        os.getenv("BUYING_LIST_DATA_DIR", str(BASE_DIR / "data"))
    )
    DATA_PATH: Path = DATA_DIR / "buying-list-data.json"
    LOGS_DIR: Path = Path(
        os.getenv("BUYING_LIST_LOGS_DIR", str(BASE_DIR / "logs"))
    )

    # --- Logging ---
    FILE_LOG_LEVEL: str = os.getenv("BUYING_LIST_FILE_LOG_LEVEL", "DEBUG")
    CONSOLE_LOG_LEVEL: str = os.getenv(
        "BUYING_LIST_CONSOLE_LOG_LEVEL", "WARNING"
    )
