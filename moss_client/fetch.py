"""
HTTP access to Moss result pages.

Result retrieval only needs ``fetch(url) -> str``. HttpFetcher is the default
implementation; tests and callers may pass any callable with that shape that
raises FetchError on failure.
"""
import logging
from typing import Callable

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)

Fetch = Callable[[str], str]

DEFAULT_HTTP_TIMEOUT = 30.0


class HttpFetcher:
    """Fetches result pages with a requests session."""

    def __init__(self, timeout: float = DEFAULT_HTTP_TIMEOUT, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, url: str) -> str:
        logger.debug(f"GET {url}")
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e
        return resp.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def ensure_directory_url(url: str) -> str:
    """Result URLs name a directory; relative page names resolve against it."""
    return url if url.endswith("/") else url + "/"
