"""Tests 1-4: State cache semantics."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from dpp_relay.relay.state import StateCache


# ── Test 1: Last write wins per panel ─────────────────────────────


def test_last_write_wins(state):
    """Later set() for the same panel replaces the earlier status."""
    state.set("P1", "installed")
    state.set("P2", "fault")
    state.set("P1", "fault")

    assert dict(state.snapshot()) == {"P1": "fault", "P2": "fault"}
    assert len(state) == 2


# ── Test 2: Snapshot is immutable and point-in-time ───────────────


def test_snapshot_is_frozen(state):
    """Writes after snapshot() don't leak into it, and it can't be mutated."""
    state.set("P1", "installed")
    snap = state.snapshot()

    state.set("P1", "fault")
    state.set("P9", "installed")

    assert dict(snap) == {"P1": "installed"}
    with pytest.raises(TypeError):
        snap["P1"] = "tampered"  # type: ignore[index]


# ── Test 3: Records carry update times ────────────────────────────


def test_records_track_update_time(state):
    """Each entry records when it was last written; last_updated is the newest."""
    assert state.last_updated is None

    state.set("P1", "installed")
    first = state.records()["P1"].updated_at
    state.set("P2", "fault")

    records = state.records()
    assert records["P1"].status == "installed"
    assert records["P2"].updated_at >= first
    assert state.last_updated == records["P2"].updated_at


# ── Test 4: Concurrent writers don't lose updates ─────────────────


def test_concurrent_writers():
    """Many threads writing distinct panels end up with every entry present."""
    cache = StateCache()

    def _write(worker: int) -> None:
        for i in range(200):
            cache.set(f"W{worker}-P{i}", "installed")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_write, range(8)))

    snap = cache.snapshot()
    assert len(snap) == 8 * 200
    assert set(snap.values()) == {"installed"}
