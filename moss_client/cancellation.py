"""
Cooperative cancellation.

Operations poll the signal before each unit of work (file upload, page fetch).
Any object with an ``is_set()`` method works; ``threading.Event`` is the usual
choice. In-flight transfers are never interrupted.
"""
from typing import Protocol


class CancelSignal(Protocol):
    def is_set(self) -> bool:
        ...


def is_cancelled(cancel: CancelSignal | None) -> bool:
    """Return True when a signal was given and has been triggered."""
    return cancel is not None and cancel.is_set()
