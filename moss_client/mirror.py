"""
Local mirror of Moss result pages.

Pages are stored verbatim except that absolute links into the service's
``/results/<n>/<id>/`` tree are cut down to relative ones.
"""
import logging
import re
from contextlib import ExitStack
from pathlib import Path
from urllib.parse import urljoin, urlparse

from .cancellation import CancelSignal, is_cancelled
from .errors import InvalidTargetError
from .fetch import Fetch, HttpFetcher, ensure_directory_url
from .models import DEFAULT_HOST
from .page_grammar import extract_match_links

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
MATCH_PAGE_SUFFIXES = ("", "-top", "-0", "-1")


def results_prefix_pattern(result_url: str | None = None) -> re.Pattern:
    """Pattern for absolute result-tree URLs on the host serving ``result_url``."""
    host = urlparse(result_url).netloc if result_url else ""
    return re.compile(rf"https?://{re.escape(host or DEFAULT_HOST)}/results/(?:\d+/)+")


def strip_result_prefix(html: str, result_url: str | None = None) -> str:
    return results_prefix_pattern(result_url).sub("", html)


def download_page(url: str, path: str | Path, fetch: Fetch | None = None) -> Path:
    """
    Fetch one page, make its links relative and write it to ``path``.

    Raises:
        FetchError: the page could not be fetched
    """
    path = Path(path)
    with ExitStack() as stack:
        fetch = fetch or stack.enter_context(HttpFetcher())
        html = fetch(url)
    return _write_page(html, path, url)


def _write_page(html: str, path: Path, result_url: str) -> Path:
    path.write_text(strip_result_prefix(html, result_url), encoding="utf-8")
    return path


def match_page_names(index: int) -> list[str]:
    return [f"match{index}{suffix}.html" for suffix in MATCH_PAGE_SUFFIXES]


class Mirror:
    """Copies the pages of a result URL into a local directory."""

    def __init__(self, fetch: Fetch | None = None, timeout: float | None = None):
        self._fetch = fetch
        self._timeout = timeout

    def mirror(self, result_url: str, target_dir: str | Path, cancel: CancelSignal | None = None) -> list[Path]:
        """
        Mirror index.html and the four pages of every match.

        Match links are discovered on the same index.html body that is written.

        The first fetch or write failure aborts the whole mirror.

        Args:
            result_url: Moss result URL
            target_dir: Existing directory receiving the pages
            cancel: Polled before each match

        Returns:
            Paths written, in order

        Raises:
            InvalidTargetError: target_dir is missing or not a directory
            FetchError: a page could not be fetched
        """
        target = Path(target_dir)
        if not target.is_dir():
            raise InvalidTargetError(f"Mirror target {target} is not an existing directory")

        base_url = ensure_directory_url(result_url)
        written = []
        with ExitStack() as stack:
            fetch = self._fetch or stack.enter_context(self._default_fetcher())
            index_html = fetch(urljoin(base_url, INDEX_PAGE))
            written.append(_write_page(index_html, target / INDEX_PAGE, result_url))
            links = extract_match_links(index_html)
            logger.info(f"Found {len(links)} match links at {result_url}")

            for index in range(len(links)):
                if is_cancelled(cancel):
                    logger.info(f"Mirror cancelled after {index} of {len(links)} matches")
                    break
                for name in match_page_names(index):
                    written.append(self._save(fetch, base_url, name, target))

        logger.info(f"Mirrored {len(written)} pages into {target}")
        return written

    def _save(self, fetch: Fetch, base_url: str, name: str, target: Path) -> Path:
        return download_page(urljoin(base_url, name), target / name, fetch=fetch)

    def _default_fetcher(self) -> HttpFetcher:
        return HttpFetcher() if self._timeout is None else HttpFetcher(timeout=self._timeout)
