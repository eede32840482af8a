"""Protocol interfaces for the relay's external collaborators."""

from dpp_relay.interfaces.channel import Channel
from dpp_relay.interfaces.ledger import LedgerClient

__all__ = ["Channel", "LedgerClient"]
