"""Mock implementations of the relay's external collaborators."""

from __future__ import annotations

import asyncio

from dpp_relay.models.events import PanelEvent


class LedgerUnavailable(ConnectionError):
    """Stand-in for an RPC timeout or rate-limit response."""


class MockLedger:
    """Implements LedgerClient protocol over an in-memory chain."""

    def __init__(self, height: int = 100) -> None:
        self.height = height
        self.events: list[PanelEvent] = []
        self.height_failures = 0
        self.fetch_failures = 0
        self.height_calls = 0
        self.fetch_calls: list[tuple[int, int]] = []
        self.fetch_delay: float = 0
        self.closed = False

    async def get_current_height(self) -> int:
        self.height_calls += 1
        if self.height_failures > 0:
            self.height_failures -= 1
            raise LedgerUnavailable("mock head query failure")
        return self.height

    async def get_events(self, from_block: int, to_block: int) -> list[PanelEvent]:
        self.fetch_calls.append((from_block, to_block))
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.fetch_failures > 0:
            self.fetch_failures -= 1
            raise LedgerUnavailable("mock eth_getLogs failure")
        return [e for e in self.events if from_block <= e.block_number <= to_block]

    async def close(self) -> None:
        self.closed = True

    def mine(self, *events: PanelEvent, blocks: int = 1) -> None:
        """Test helper: advance the head and stage events in the new range."""
        self.height += blocks
        self.events.extend(events)


class FakeChannel:
    """Implements Channel protocol. Records frames, optionally fails writes."""

    def __init__(
        self,
        name: str = "client",
        fail_after: int | None = None,
        send_delay: float = 0,
    ) -> None:
        self.name = name
        self.fail_after = fail_after
        self.send_delay = send_delay
        self.sent: list[str] = []
        self.closed = False
        self.close_code: int | None = None
        self.send_attempts = 0

    async def send_str(self, data: str) -> None:
        self.send_attempts += 1
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise ConnectionResetError(f"{self.name}: connection reset by peer")
        self.sent.append(data)

    async def close(self, *, code: int = 1000, message: bytes = b"") -> bool:
        self.closed = True
        self.close_code = code
        return True

    def __repr__(self) -> str:
        return f"FakeChannel({self.name!r})"
