"""Input side of the pipeline: read lines, validate them, feed the work queue."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import sys
import threading
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Callable, Iterable, Optional, TextIO, Union

import aiofiles
import httpx

from url_status.errors import InvalidURL
from url_status.telemetry.metrics import Metrics
from url_status.work_queue import WorkQueue

logger = logging.getLogger(__name__)

Lines = Union[Iterable[str], AsyncIterable[str]]

PROMPT = "Input URL: "


def validate_url(text: str) -> Optional[str]:
    """Return the stripped URL, ``None`` for a blank line.

    Raises :class:`InvalidURL` unless the text is an absolute URL with both a
    scheme and a host.
    """
    candidate = text.strip()
    if not candidate:
        return None
    try:
        parsed = httpx.URL(candidate)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidURL(candidate, str(exc)) from exc
    if not parsed.scheme or not parsed.host:
        raise InvalidURL(candidate, "not an absolute URL")
    return candidate


def _pump(stream: TextIO, put: Callable[[object], None]) -> None:
    """Read ``stream`` to EOF on the calling thread, handing each line to ``put``.

    A stream backed by a file descriptor is read with :func:`os.read` so the
    thread never holds the buffered reader's lock while it waits. EOF is
    signalled with ``""`` and a read error is handed over as the exception.
    """
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        fd = None
    try:
        if fd is None:
            while True:
                line = stream.readline()
                put(line)
                if not line:
                    return
        decoder = codecs.getincrementaldecoder(getattr(stream, "encoding", None) or "utf-8")(
            errors="replace"
        )
        pending = ""
        while True:
            chunk = os.read(fd, 65536)
            pending += decoder.decode(chunk, final=not chunk)
            *complete, pending = pending.split("\n")
            for line in complete:
                put(line + "\n")
            if not chunk:
                if pending:
                    put(pending)
                put("")
                return
    except (OSError, ValueError) as exc:
        put(exc)


async def read_stream(stream: TextIO, prompt: Optional[str] = PROMPT) -> AsyncIterator[str]:
    """Yield lines from a blocking text stream without stalling the loop.

    The blocking reads happen on a daemon thread that hands lines back through
    ``loop.call_soon_threadsafe``. A daemon thread parked on an idle terminal
    does not hold up interpreter shutdown, so Ctrl-C exits straight away. The
    prompt goes to stderr and only when the stream is an interactive terminal.
    """
    loop = asyncio.get_running_loop()
    lines: asyncio.Queue = asyncio.Queue()
    interactive = prompt is not None and stream.isatty()

    def put(item: object) -> None:
        loop.call_soon_threadsafe(lines.put_nowait, item)

    def run() -> None:
        try:
            _pump(stream, put)
        except RuntimeError:
            # event loop already closed; nobody is waiting for more lines
            return

    threading.Thread(target=run, name="stdin-reader", daemon=True).start()
    while True:
        if interactive:
            print(prompt, end="", file=sys.stderr, flush=True)
        item = await lines.get()
        if isinstance(item, BaseException):
            raise item
        if not item:
            break
        yield item


async def read_file(path: Path) -> AsyncIterator[str]:
    """Yield the lines of a UTF-8 text file."""
    async with aiofiles.open(path, "r", encoding="utf-8") as fd:
        async for line in fd:
            yield line


async def _iter_lines(lines: Lines) -> AsyncIterator[str]:
    if isinstance(lines, AsyncIterable):
        async for line in lines:
            yield line
    else:
        for line in lines:
            yield line


async def produce(
    lines: Lines,
    work_q: WorkQueue,
    metrics: Optional[Metrics] = None,
) -> int:
    """Validate ``lines`` and enqueue every acceptable URL.

    Blank lines are skipped and invalid ones logged. The queue is closed on
    the way out in every case, read errors included, so the workers drain
    and stop. Returns the number of URLs enqueued.
    """
    count = 0
    try:
        async for line in _iter_lines(lines):
            try:
                url = validate_url(line)
            except InvalidURL as exc:
                logger.warning("Invalid URL: %s (%s)", exc.text, exc.reason)
                if metrics is not None:
                    metrics.inc("urls_rejected")
                continue
            if url is None:
                continue
            await work_q.put(url)
            count += 1
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading input: %s", exc)
        if metrics is not None:
            metrics.record_error(exc)
    finally:
        await work_q.close()

    logger.debug("Producer finished: %d URLs enqueued", count)
    return count
