"""
Exceptions raised by the Moss client.

Every error surfaces to the caller immediately; the only non-error early exit
is cooperative cancellation, which returns ``None`` or a partial report.
"""


class MossError(Exception):
    """Base exception for Moss client errors."""
    pass


class MossConnectionError(MossError):
    """Transport failure while connecting to, reading from or writing to the service."""
    pass


class LanguageNotSupportedError(MossError):
    """The service rejected the requested language."""
    pass


class MalformedResponseError(MossError):
    """The result line sent back by the service is not a URL."""

    def __init__(self, text: str):
        super().__init__(f"Malformed result URL: {text!r}")
        self.text = text


class InvalidRegionError(MossError):
    """A line region token is not of the form ``<from>-<to>``."""

    def __init__(self, token: str, reason: str = "expected '<from>-<to>'"):
        super().__init__(f"Invalid region {token!r}: {reason}")
        self.token = token


class InvalidTargetError(MossError):
    """Mirror destination is missing or is not a directory."""
    pass


class FetchError(MossError):
    """An HTTP result page could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Unable to get url {url}: {reason}")
        self.url = url


class MalformedPageError(MossError):
    """A result page does not follow the expected layout."""
    pass


class SourceConsumedError(MossError):
    """A code source was read a second time."""
    pass
