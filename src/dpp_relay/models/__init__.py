"""Data models for the dpp_relay daemon."""

from dpp_relay.models.events import PanelEvent
from dpp_relay.models.records import BroadcastResult, PollResult, StatusRecord
from dpp_relay.models.config import RelayConfig
from dpp_relay.models.snapshots import PollerHealth, RelayHealth

__all__ = [
    "PanelEvent",
    "BroadcastResult", "PollResult", "StatusRecord",
    "RelayConfig",
    "PollerHealth", "RelayHealth",
]
