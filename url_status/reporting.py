"""Sinks that turn :class:`FetchOutcome` records into operator output."""

from __future__ import annotations

import logging
import sys
import threading
from typing import IO, Callable, Optional

import orjson

from url_status.models import FetchOutcome

logger = logging.getLogger(__name__)

Reporter = Callable[[FetchOutcome], None]


def log_outcome(outcome: FetchOutcome) -> None:
    """Emit a single log line for ``outcome``."""
    if outcome.kind == "ok":
        logger.info("Response status: %d, URL: %s", outcome.status_code, outcome.url)
    elif outcome.kind == "invalid_request":
        logger.error("Error creating request: %s, URL: %s", outcome.error, outcome.url)
    else:
        logger.warning(
            "Request failed: %s, URL: %s (after %d attempts)",
            outcome.error,
            outcome.url,
            outcome.attempts,
        )


class JsonLinesReporter:
    """Write one orjson-encoded object per outcome to ``stream``."""

    def __init__(self, stream: Optional[IO[bytes]] = None) -> None:
        self._stream = stream if stream is not None else sys.stdout.buffer
        self._lock = threading.Lock()

    def __call__(self, outcome: FetchOutcome) -> None:
        line = orjson.dumps(outcome.as_dict(), option=orjson.OPT_APPEND_NEWLINE)
        with self._lock:
            self._stream.write(line)
            self._stream.flush()
