"""EVM ledger integration via web3.py."""

from dpp_relay.ethereum.client import Web3LedgerClient

__all__ = ["Web3LedgerClient"]
