from __future__ import annotations

import logging
import os

# per-URL outcome lines are the program's output, not diagnostics
REPORT_LOGGER = "url_status.reporting"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once. Level can be given explicitly or taken from
    LOG_LEVEL env var (default INFO). httpx request logging is only kept at
    DEBUG. Outcome reports are always emitted, whatever the level.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s:%(lineno)d | %(message)s",
    )
    quiet = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(quiet)
    logging.getLogger(REPORT_LOGGER).setLevel(logging.INFO)
