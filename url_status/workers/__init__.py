"""Async worker implementations used by the pipeline."""

from __future__ import annotations

from .fetch import fetch_worker, check_url

__all__ = [
    "fetch_worker",
    "check_url",
]
