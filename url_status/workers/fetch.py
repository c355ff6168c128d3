"""Worker that checks queued URLs and reports their HTTP status."""

from __future__ import annotations

import logging
from time import perf_counter

from url_status.clients.transport import StatusTransport
from url_status.constants import STOP_FETCH
from url_status.core.retry import RETRIABLE, retry_logic
from url_status.errors import RequestConstructionError
from url_status.models import FetchOutcome
from url_status.reporting import Reporter
from url_status.telemetry.metrics import Metrics
from url_status.work_queue import WorkQueue

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    # some httpx timeouts carry an empty message
    return str(exc) or type(exc).__name__


async def check_url(
    url: str,
    transport: StatusTransport,
    retries: int,
    retry_sleep: float,
) -> FetchOutcome:
    """Run the retry-fetch protocol for one URL and return its outcome.

    Any completed response counts as success, 4xx and 5xx included. Transport
    errors are retried up to ``retries`` times with a fixed ``retry_sleep``
    pause; a request that cannot even be built fails at once. Any other error
    is logged and reported as a failure, so the caller always gets an outcome.
    """
    attempts = 0
    start = perf_counter()

    async def _fetch() -> int:
        nonlocal attempts
        attempts += 1
        return await transport.fetch_status(url)

    def _on_retry(n: int, exc: BaseException) -> None:
        logger.warning("Retry %d for URL: %s (%s)", n, url, _describe(exc))

    try:
        status = await retry_logic(_fetch, retries, retry_sleep, on_retry=_on_retry)
    except RequestConstructionError as exc:
        return FetchOutcome(
            url=url,
            kind="invalid_request",
            attempts=attempts,
            error=_describe(exc),
            error_type=type(exc).__name__,
            duration=perf_counter() - start,
        )
    except RETRIABLE as exc:
        return FetchOutcome(
            url=url,
            kind="failed",
            attempts=attempts,
            error=_describe(exc),
            error_type=type(exc).__name__,
            duration=perf_counter() - start,
        )
    except Exception as exc:
        logger.exception("Unexpected error checking %s after %d attempts", url, attempts)
        return FetchOutcome(
            url=url,
            kind="failed",
            attempts=attempts,
            error=_describe(exc),
            error_type=type(exc).__name__,
            duration=perf_counter() - start,
        )

    return FetchOutcome(
        url=url,
        kind="ok",
        attempts=attempts,
        status_code=status,
        duration=perf_counter() - start,
    )


async def fetch_worker(
    wid: int,
    work_q: WorkQueue,
    transport: StatusTransport,
    retries: int,
    retry_sleep: float,
    report: Reporter,
    metrics: Metrics,
) -> None:
    """
    Pulls URLs from *work_q* until the end-of-data sentinel arrives. Every URL
    taken off the queue produces exactly one outcome passed to *report*; a
    failure on one URL never stops the worker.
    """
    while True:
        item = await work_q.get()
        if item is STOP_FETCH:
            work_q.task_done()
            logger.debug("Fetcher %d received STOP", wid)
            break

        url: str = item
        try:
            outcome = await check_url(url, transport, retries, retry_sleep)
            metrics.observe(outcome)
            try:
                report(outcome)
            except Exception as exc:
                metrics.record_error(exc)
                logger.exception("Fetcher %d: reporting %s failed", wid, url)
        finally:
            work_q.task_done()
