"""Panel state cache - latest status per panel, shared by poller and API."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from dpp_relay.models.records import StatusRecord


class StateCache:
    """Maps panel id to the most recently processed event type.

    Writes are last-write-wins in processing order. Entries are never evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, StatusRecord] = {}

    def set(self, panel_id: str, status: str) -> None:
        record = StatusRecord(
            status=status,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            self._records[panel_id] = record

    def snapshot(self) -> Mapping[str, str]:
        """Point-in-time, read-only view of panel id -> status."""
        with self._lock:
            copy = {pid: rec.status for pid, rec in self._records.items()}
        return MappingProxyType(copy)

    def records(self) -> Mapping[str, StatusRecord]:
        with self._lock:
            copy = dict(self._records)
        return MappingProxyType(copy)

    @property
    def last_updated(self) -> str | None:
        with self._lock:
            if not self._records:
                return None
            return max(rec.updated_at for rec in self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
