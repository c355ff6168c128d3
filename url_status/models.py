from __future__ import annotations
from dataclasses import dataclass
from typing import Literal

OutcomeKind = Literal["ok", "failed", "invalid_request"]


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    url: str
    kind: OutcomeKind
    attempts: int
    status_code: int | None = None
    error: str | None = None
    error_type: str | None = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.kind == "ok"

    def as_dict(self) -> dict:
        return {
            "url": self.url,
            "kind": self.kind,
            "status_code": self.status_code,
            "error": self.error,
            "error_type": self.error_type,
            "attempts": self.attempts,
            "duration": round(self.duration, 4),
        }
