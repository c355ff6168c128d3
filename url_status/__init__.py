"""Public package exports for the :mod:`url_status` library."""

from __future__ import annotations

__all__ = [
    "pipeline",
    "config",
    "workers",
    "constants",
    "models",
    "errors",
    "logging_setup",
    "core",
    "telemetry",
    "clients",
    "producer",
    "reporting",
    "work_queue",
]
