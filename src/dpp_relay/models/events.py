"""Contract event models decoded from the PanelEventAdded log stream."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PanelEvent:
    """Emitted when an attestor records a lifecycle event for a panel."""

    panel_id: str
    event_type: str  # "installed", "fault", ...
    event_hash: str  # 0x-prefixed bytes32
    validated_by: str  # attestor address
    timestamp: int  # on-chain uint256 seconds
    block_number: int
    log_index: int = 0
    tx_hash: str = ""

    def to_notification(self) -> dict[str, str]:
        """Payload pushed to connected clients."""
        return {"panelId": self.panel_id, "eventType": self.event_type}
