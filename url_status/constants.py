from __future__ import annotations

# ──────────────────────────────────────────────────────────────────────────────
# Sentinel object to terminate workers
# ──────────────────────────────────────────────────────────────────────────────
STOP_FETCH: object = object()       # fetch workers

DEFAULT_CONCURRENCY = 8
DEFAULT_TIMEOUT = 8.0
DEFAULT_RETRIES = 3
DEFAULT_RETRY_SLEEP = 1.0

REQUEST_HEADERS = {"Connection": "close"}
