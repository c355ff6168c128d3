"""FIFO work queue connecting the URL producer to the fetch workers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from url_status.constants import STOP_FETCH
from url_status.errors import WorkQueueClosed

logger = logging.getLogger(__name__)


class WorkQueue:
    """
    A small wrapper around an unbounded asyncio.Queue adding close semantics.

    Closing enqueues one :data:`STOP_FETCH` sentinel per consumer behind the
    last URL, so workers drain every item first and each of them then sees
    exactly one end-of-data marker.
    """

    def __init__(self, consumers: int) -> None:
        """Create a new queue.

        Parameters
        ----------
        consumers:
            Number of workers that will read from the queue. Must be >= 1.
        """
        if consumers < 1:
            raise ValueError("consumers must be >= 1")
        self._consumers = consumers
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self._enqueued = 0

    @property
    def closed(self) -> bool:
        """Return ``True`` once the producer has closed the queue."""
        return self._closed

    @property
    def enqueued(self) -> int:
        """Return the number of URLs put so far."""
        return self._enqueued

    async def put(self, url: str) -> None:
        """Enqueue a validated URL. Raises :class:`WorkQueueClosed` after close."""
        if self._closed:
            raise WorkQueueClosed("cannot put into a closed work queue")
        await self._queue.put(url)
        self._enqueued += 1

    async def close(self) -> None:
        """Signal end of input. May only be called once, by the producer."""
        if self._closed:
            raise WorkQueueClosed("work queue already closed")
        self._closed = True
        for _ in range(self._consumers):
            await self._queue.put(STOP_FETCH)
        logger.debug(
            "Work queue closed after %d URLs; %d workers signalled",
            self._enqueued,
            self._consumers,
        )

    async def get(self) -> Any:
        """Return the next URL, or :data:`STOP_FETCH` once closed and drained."""
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every item, sentinels included, has been processed."""
        await self._queue.join()
