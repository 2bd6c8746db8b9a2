# src/scrapers/page_fetcher.py

"""HTTP fetch of a source page's raw markup."""

import logging
import random
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.settings import Settings


class FetchError(Exception):
    """Raised when a page cannot be fetched at the network level."""


@dataclass
class FetchResponse:
    """Status code and body text of a fetched page."""

    status: int
    body: str


class PageFetcher:
    """Fetch source pages with a rotating User-Agent.

    A single attempt is made per call.  A failed source is simply tried
    again on the next scheduled update.
    """

    def __init__(self, timeout: int | None = None) -> None:
        self.logger = logging.getLogger("buying_list.fetcher")
        self.settings = Settings()
        self.session = curl_requests.Session()
        self._request_timeout: int = (
            timeout if timeout is not None
            else self.settings.REQUEST_TIMEOUT
        )

    def build_headers(
        self, extra: dict[str, str] | None = None,
    ) -> dict[str, str]:
        """Default headers plus a randomly chosen User-Agent."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": random.choice(self.settings.USER_AGENTS),
        }
        if extra:
            headers.update(extra)
        return headers

    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> FetchResponse:
        """GET *url* and return its status and body.

        Raises:
            FetchError: on connection errors and timeouts.
        """
        try:
            resp = self.session.get(
                url,
                headers=self.build_headers(headers),
                timeout=self._request_timeout,
            )
        except Exception as exc:
            self.logger.warning(
                "Request error for %s: %s", url, exc, exc_info=True,
            )
            raise FetchError(str(exc)) from exc

        if resp.status_code != 200:
            self.logger.warning(
                "HTTP %d for %s", resp.status_code, url,
            )
        return FetchResponse(status=resp.status_code, body=resp.text)

    def is_challenge_page(self, body: str) -> bool:
        """Detect a Cloudflare challenge instead of the product page."""
        lower = body.lower()
        for marker in self.settings.CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "Challenge page detected (marker: '%s')", marker,
                )
                return True
        return False

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
