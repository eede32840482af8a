"""Result records produced by the relay components."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StatusRecord:
    """Latest known status of one panel."""

    status: str
    updated_at: str  # ISO-8601 UTC, local processing time


@dataclass
class BroadcastResult:
    """Outcome of fanning one event out to the registered channels."""

    panel_id: str
    delivered: int = 0
    failed: int = 0


@dataclass
class PollResult:
    """Outcome of a single poll iteration."""

    from_block: int
    to_block: int
    events: int = 0
    delivered: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def empty(self) -> bool:
        return self.to_block < self.from_block
