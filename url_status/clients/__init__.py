from __future__ import annotations

from .transport import StatusTransport

__all__ = ["StatusTransport"]
