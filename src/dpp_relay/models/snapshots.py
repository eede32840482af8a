"""JSON-serializable snapshot models for the HTTP surface."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class PollerHealth:
    cursor: int | None
    consecutive_failures: int
    last_success_at: str | None
    last_error: str | None
    healthy: bool
    next_poll_in: float


@dataclass
class RelayHealth:
    """Everything /api/health reports."""

    poller: PollerHealth
    clients: int
    panels: int
    last_update: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
