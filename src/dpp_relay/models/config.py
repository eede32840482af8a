"""Configuration models for the relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RelayConfig:
    """Complete relay configuration."""

    # Server
    host: str = "0.0.0.0"
    port: int = 10000

    # Ledger
    rpc_url: str = "https://ethereum-sepolia-rpc.publicnode.com"
    contract_address: str = "0x59B649856d8c5Fb6991d30a345f0b923eA91a3f7"
    request_timeout: int = 30  # seconds per RPC call
    start_block: int | None = None  # None = start at the current head

    # Relay
    poll_interval: float = 10  # seconds
    error_backoff: float = 10  # first retry delay after a failed poll
    max_backoff: float = 300  # cap for the exponential backoff
    failure_threshold: int = 3  # consecutive failures before reporting unhealthy
    send_timeout: float = 5  # seconds per client write
    shutdown_grace: float = 5  # seconds for an in-flight batch at shutdown
    log_level: str = "info"
