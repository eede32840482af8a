"""dpp_relay - relays on-chain panel events to live WebSocket clients."""

__version__ = "0.1.0"
