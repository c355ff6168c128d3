from __future__ import annotations

import threading
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Iterable, Tuple

from url_status.models import FetchOutcome


def _percentile(sorted_values: List[float], p: float) -> float:
    if not sorted_values:
        return float("nan")
    k = (len(sorted_values) - 1) * (p / 100.0)
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return sorted_values[int(k)]
    d0 = sorted_values[f] * (c - k)
    d1 = sorted_values[c] * (k - f)
    return d0 + d1


def pct_summary(values: Iterable[float]) -> Dict[str, float]:
    vals = sorted(v for v in values if v is not None)
    if not vals:
        return {"count": 0, "min": float("nan"), "p50": float("nan"),
                "p95": float("nan"), "p99": float("nan"), "max": float("nan")}
    return {
        "count": len(vals),
        "min": vals[0],
        "p50": _percentile(vals, 50),
        "p95": _percentile(vals, 95),
        "p99": _percentile(vals, 99),
        "max": vals[-1],
    }


@dataclass
class Metrics:
    lock: threading.Lock = field(default_factory=threading.Lock)

    urls_total: int = 0
    urls_ok: int = 0
    urls_failed: int = 0
    urls_invalid_request: int = 0
    urls_rejected: int = 0

    retries_total: int = 0

    # per-URL wall time, retries and sleeps included
    fetch_durations: List[float] = field(default_factory=list)

    status_codes: Counter[int] = field(default_factory=Counter)
    errors_by_type: Counter[str] = field(default_factory=Counter)

    def inc(self, attr: str, value: int = 1) -> None:
        with self.lock:
            setattr(self, attr, getattr(self, attr) + value)

    def record_error(self, exc: BaseException) -> None:
        with self.lock:
            self.errors_by_type[type(exc).__name__] += 1

    def observe(self, outcome: FetchOutcome) -> None:
        """Account for one terminal outcome."""
        with self.lock:
            self.urls_total += 1
            self.retries_total += max(0, outcome.attempts - 1)
            self.fetch_durations.append(outcome.duration)
            if outcome.kind == "ok":
                self.urls_ok += 1
                if outcome.status_code is not None:
                    self.status_codes[outcome.status_code] += 1
            elif outcome.kind == "invalid_request":
                self.urls_invalid_request += 1
            else:
                self.urls_failed += 1
            if outcome.error_type:
                self.errors_by_type[outcome.error_type] += 1

    def summary(self) -> Tuple[str, Dict]:
        with self.lock:
            duration_stats = pct_summary(self.fetch_durations)
            res = {
                "urls_total": self.urls_total,
                "urls_ok": self.urls_ok,
                "urls_failed": self.urls_failed,
                "urls_invalid_request": self.urls_invalid_request,
                "urls_rejected": self.urls_rejected,
                "retries_total": self.retries_total,
                "fetch_seconds": duration_stats,
                "status_codes": dict(self.status_codes),
                "errors_by_type": dict(self.errors_by_type),
            }

        lines = []
        lines.append("===== STATUS SUMMARY =====")
        lines.append(f"URLs       : total={res['urls_total']}  ok={res['urls_ok']}  "
                     f"fail={res['urls_failed']}  invalid={res['urls_invalid_request']}  "
                     f"rejected={res['urls_rejected']}")
        lines.append(f"Retries    : {res['retries_total']}")
        if duration_stats["count"]:
            lines.append("")
            lines.append("Fetch seconds:")
            lines.append(
                f"  min={duration_stats['min']:.4f}  "
                f"p50={duration_stats['p50']:.4f}  "
                f"p95={duration_stats['p95']:.4f}  "
                f"p99={duration_stats['p99']:.4f}  "
                f"max={duration_stats['max']:.4f}"
            )
        if res["status_codes"]:
            lines.append("")
            lines.append("Status codes:")
            for code, n in sorted(res["status_codes"].items()):
                lines.append(f"  {code}: {n}")
        if res["errors_by_type"]:
            lines.append("")
            lines.append("Errors by type:")
            for k, v in sorted(res["errors_by_type"].items(), key=lambda kv: kv[1], reverse=True):
                lines.append(f"  {k}: {v}")

        return "\n".join(lines), res
