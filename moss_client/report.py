"""
Extraction of structured results from a Moss result URL.
"""
import logging
from contextlib import ExitStack
from urllib.parse import urljoin

from .cancellation import CancelSignal, is_cancelled
from .fetch import Fetch, HttpFetcher, ensure_directory_url
from .models import Match, Report
from .page_grammar import extract_match_links, parse_match_page

logger = logging.getLogger(__name__)


def discover_match_links(fetch: Fetch, result_url: str) -> list[str]:
    """Fetch the index page and return its match links in first-seen order."""
    links = extract_match_links(fetch(result_url))
    logger.info(f"Found {len(links)} match links at {result_url}")
    return links


def match_page_url(result_url: str, index: int, suffix: str = "-top") -> str:
    return urljoin(ensure_directory_url(result_url), f"match{index}{suffix}.html")


class ReportExtractor:
    """Builds a Report from the per-match pages of a result URL."""

    def __init__(self, fetch: Fetch | None = None, timeout: float | None = None):
        """
        Args:
            fetch: Page fetch callable; a fresh HttpFetcher is used per call when omitted
            timeout: HTTP timeout for the default fetcher
        """
        self._fetch = fetch
        self._timeout = timeout

    def extract(self, result_url: str, cancel: CancelSignal | None = None) -> Report:
        """
        Fetch and parse every match of a result.

        Returns:
            The full Report, or the matches parsed so far if cancelled

        Raises:
            FetchError: a page could not be fetched
            MalformedPageError, InvalidRegionError: a match page could not be parsed
        """
        with ExitStack() as stack:
            fetch = self._fetch or stack.enter_context(self._default_fetcher())
            links = discover_match_links(fetch, result_url)

            matches: list[Match] = []
            for index in range(len(links)):
                if is_cancelled(cancel):
                    logger.info(f"Extraction cancelled after {len(matches)} of {len(links)} matches")
                    break
                matches.append(parse_match_page(fetch(match_page_url(result_url, index))))
                logger.debug(f"Parsed match {index}")

        return Report(matches=matches)

    def _default_fetcher(self) -> HttpFetcher:
        return HttpFetcher() if self._timeout is None else HttpFetcher(timeout=self._timeout)
