"""LedgerClient protocol - read access to the contract's event log."""

from __future__ import annotations

from typing import Protocol

from dpp_relay.models.events import PanelEvent


class LedgerClient(Protocol):
    """Block-range access to PanelEventAdded logs."""

    async def get_current_height(self) -> int:
        """Return the latest block number known to the node."""
        ...

    async def get_events(self, from_block: int, to_block: int) -> list[PanelEvent]:
        """Return decoded events in [from_block, to_block], in ledger order."""
        ...

    async def close(self) -> None:
        ...
