"""Live fixtures: a real Sepolia RPC endpoint.

Set DPP_RELAY_RPC_URL (and optionally DPP_RELAY_CONTRACT_ADDRESS) to run.
"""

from __future__ import annotations

import os

import pytest

from dpp_relay.ethereum.client import Web3LedgerClient
from tests.conftest import CONTRACT_ADDRESS


@pytest.fixture
async def sepolia_ledger():
    rpc_url = os.environ.get("DPP_RELAY_RPC_URL")
    if not rpc_url:
        pytest.skip("DPP_RELAY_RPC_URL not set")
    client = Web3LedgerClient(
        rpc_url,
        os.environ.get("DPP_RELAY_CONTRACT_ADDRESS", CONTRACT_ADDRESS),
        request_timeout=20,
    )
    yield client
    await client.close()
