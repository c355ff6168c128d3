"""Environment-based configuration loading for the checker."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from dotenv import load_dotenv

from url_status.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_SLEEP,
    DEFAULT_TIMEOUT,
)


OutputMode = Literal["log", "json"]


@dataclass(frozen=True)
class Config:
    """Configuration values derived from environment variables.

    Read once at startup; the CLI overrides individual fields with
    :func:`dataclasses.replace` and the result is never mutated afterwards.
    """
    # Worker pool
    concurrency: int = DEFAULT_CONCURRENCY

    # HTTP
    timeout: float = DEFAULT_TIMEOUT
    read_timeout: float | None = None
    verify_tls: bool = False

    # Retry policy
    retries: int = DEFAULT_RETRIES
    retry_sleep: float = DEFAULT_RETRY_SLEEP

    # Reporting
    output: OutputMode = "log"

    def validate(self) -> "Config":
        """Raise ``ValueError`` for settings the engine cannot run with."""
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")
        if self.retry_sleep < 0:
            raise ValueError("retry_sleep must be >= 0")
        if self.output not in ("log", "json"):
            raise ValueError(f"unknown output mode: {self.output}")
        return self


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


async def initialize_environment() -> Config:
    """Load environment variables and build a :class:`Config` instance.

    A ``.env`` file in the working directory is honoured through
    :func:`dotenv.load_dotenv`; variables already present in the environment
    win over the file.
    """
    load_dotenv()

    return Config(
        concurrency=int(os.getenv("URLCHK_CONCURRENCY", str(DEFAULT_CONCURRENCY))),
        timeout=float(os.getenv("URLCHK_TIMEOUT", str(DEFAULT_TIMEOUT))),
        read_timeout=_optional_float("URLCHK_READ_TIMEOUT"),
        verify_tls=bool(int(os.getenv("URLCHK_VERIFY_TLS", "0"))),
        retries=int(os.getenv("URLCHK_RETRIES", str(DEFAULT_RETRIES))),
        retry_sleep=float(os.getenv("URLCHK_RETRY_SLEEP", str(DEFAULT_RETRY_SLEEP))),
        output=os.getenv("URLCHK_OUTPUT", "log").strip().lower(),  # type: ignore[arg-type]
    ).validate()
