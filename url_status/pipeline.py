"""Top level orchestration of the producer and the fetch worker pool."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

import httpx

from url_status.clients.transport import StatusTransport
from url_status.config import Config, initialize_environment
from url_status.models import FetchOutcome
from url_status.producer import Lines, produce
from url_status.reporting import JsonLinesReporter, Reporter, log_outcome
from url_status.telemetry.metrics import Metrics
from url_status.work_queue import WorkQueue
from url_status.workers.fetch import fetch_worker

logger = logging.getLogger(__name__)


def default_reporter(config: Config) -> Reporter:
    """Return the sink matching ``config.output``."""
    if config.output == "json":
        return JsonLinesReporter()
    return log_outcome


async def run_pipeline(
    lines: Lines,
    config: Config | None = None,
    report: Optional[Reporter] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[List[FetchOutcome], Metrics]:
    """Check every URL in ``lines`` and return the outcomes and metrics.

    Parameters
    ----------
    lines:
        Sync or async iterable of raw input lines; validated by the producer.
    config:
        Optional :class:`Config` instance. If ``None``, environment variables
        are loaded via :func:`initialize_environment`.
    report:
        Callable receiving each :class:`FetchOutcome` once. Defaults to the
        sink selected by ``config.output``.
    transport:
        Optional httpx transport handed to :class:`StatusTransport`.

    The call returns only after the input is exhausted, the queue is closed
    and drained, and every worker has exited.
    """
    if config is None:
        config = await initialize_environment()
    config.validate()

    metrics = Metrics()
    results: List[FetchOutcome] = []
    sink = report if report is not None else default_reporter(config)

    def _report(outcome: FetchOutcome) -> None:
        results.append(outcome)
        sink(outcome)

    work_q = WorkQueue(consumers=config.concurrency)

    async with StatusTransport(
        timeout=config.timeout,
        read_timeout=config.read_timeout,
        verify_tls=config.verify_tls,
        max_connections=config.concurrency,
        transport=transport,
    ) as client:

        fetch_tasks = [
            asyncio.create_task(
                fetch_worker(
                    i, work_q, client,
                    config.retries, config.retry_sleep,
                    _report, metrics,
                ),
                name=f"fetcher-{i}",
            )
            for i in range(config.concurrency)
        ]
        producer_task = asyncio.create_task(
            produce(lines, work_q, metrics), name="producer"
        )

        # ─── wait for input to end, then for the pool to drain ───────────
        producer_error: BaseException | None = None
        try:
            enqueued = await producer_task
        except Exception as exc:
            producer_error = exc
            enqueued = work_q.enqueued
            logger.exception("Producer aborted after %d URLs", enqueued)

        logger.debug("Input finished (%d URLs); draining workers", enqueued)
        await work_q.join()
        await asyncio.gather(*fetch_tasks)

    if producer_error is not None:
        raise producer_error

    logger.info("Completed. OK: %d  Failures: %d  Invalid: %d",
                metrics.urls_ok, metrics.urls_failed, metrics.urls_invalid_request)
    return results, metrics
