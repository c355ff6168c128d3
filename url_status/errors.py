"""Exception hierarchy for the URL status checker."""

from __future__ import annotations


class UrlStatusError(Exception):
    """Base class for errors raised by :mod:`url_status`."""


class InvalidURL(UrlStatusError):
    """Raised by the producer when an input line is not an absolute URL."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.reason = reason


class RequestConstructionError(UrlStatusError):
    """The request could not be built; no network call was made."""


class WorkQueueClosed(UrlStatusError):
    """Raised when putting into, or closing, an already closed work queue."""
