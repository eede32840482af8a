"""Relay core - state cache, connection registry, broadcaster and poller."""

from dpp_relay.relay.state import StateCache
from dpp_relay.relay.registry import ConnectionRegistry
from dpp_relay.relay.broadcaster import Broadcaster, encode_notification
from dpp_relay.relay.poller import LedgerEventPoller

__all__ = [
    "StateCache",
    "ConnectionRegistry",
    "Broadcaster",
    "encode_notification",
    "LedgerEventPoller",
]
