"""HTTP and WebSocket surface."""

from dpp_relay.api.server import create_app

__all__ = ["create_app"]
