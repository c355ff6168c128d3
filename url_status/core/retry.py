from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Optional, TypeVar, overload

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRIABLE: tuple[type[BaseException], ...] = (
    httpx.RequestError,
    asyncio.TimeoutError,
)

RetryHook = Callable[[int, BaseException], None]


@overload
async def retry_logic(
    func: Callable[..., Awaitable[T]],
    max_retries: int,
    retry_sleep: float,
    *args: Any,
    on_retry: Optional[RetryHook] = None,
    **kwargs: Any
) -> T: ...


@overload
async def retry_logic(
    func: Callable[..., Awaitable[None]],
    max_retries: int,
    retry_sleep: float,
    *args: Any,
    on_retry: Optional[RetryHook] = None,
    **kwargs: Any
) -> None: ...


async def retry_logic(
    func: Callable[..., Awaitable[Any]],
    max_retries: int,
    retry_sleep: float,
    *args: Any,
    on_retry: Optional[RetryHook] = None,
    **kwargs: Any
) -> Any:
    """Await ``func`` until it succeeds or ``max_retries`` retries are spent.

    Only transport-level errors (:data:`RETRIABLE`) are retried, after a fixed
    ``retry_sleep`` delay; ``func`` is therefore called at most
    ``max_retries + 1`` times. The last retriable error is re-raised once the
    budget is exhausted. Any other exception propagates immediately.

    ``on_retry(retry_number, exc)`` is called before each sleep.
    """
    name = getattr(func, "__name__", str(func))
    attempt = 0

    while True:
        try:
            attempt_start = perf_counter()
            result = await func(*args, **kwargs)
            logger.debug(
                "Function %s succeeded in %.3f s on attempt %d/%d",
                name,
                perf_counter() - attempt_start,
                attempt + 1,
                max_retries + 1,
            )
            return result

        except RETRIABLE as exc:
            if attempt >= max_retries:
                logger.debug(
                    "Function %s failed after %d retries", name, max_retries
                )
                raise
            attempt += 1
            logger.debug(
                "Function %s encountered %s, retrying in %.1f s (%d/%d)",
                name,
                type(exc).__name__,
                retry_sleep,
                attempt,
                max_retries,
            )
            if on_retry is not None:
                on_retry(attempt, exc)
            await asyncio.sleep(retry_sleep)
