"""Shared fixtures for dpp_relay tests."""

from __future__ import annotations

import asyncio

import pytest
from pytest_metadata.plugin import metadata_key

from dpp_relay.models.config import RelayConfig
from dpp_relay.relay.broadcaster import Broadcaster
from dpp_relay.relay.poller import LedgerEventPoller
from dpp_relay.relay.registry import ConnectionRegistry
from dpp_relay.relay.state import StateCache

from tests.mocks import FakeChannel, MockLedger

CONTRACT_ADDRESS = "0x59B649856d8c5Fb6991d30a345f0b923eA91a3f7"

EXPLORER_BASE = "https://sepolia.etherscan.io"


def etherscan_link(kind: str, id: str, label: str | None = None) -> str:
    """Build an HTML anchor to Etherscan for the report."""
    url = f"{EXPLORER_BASE}/{kind}/{id}"
    text = label or f"{id[:8]}...{id[-4:]}"
    return f'<a href="{url}" target="_blank">{text}</a>'


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Ethereum Sepolia"
    meta["Registry Contract"] = CONTRACT_ADDRESS


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject a clickable contract link into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Sepolia Explorer</strong><br/>"
        f'Registry: {etherscan_link("address", CONTRACT_ADDRESS, CONTRACT_ADDRESS)}'
        "</div>"
    )


def make_test_config(**overrides) -> RelayConfig:
    """Build a RelayConfig suitable for testing."""
    defaults = dict(
        host="127.0.0.1",
        port=0,
        rpc_url="http://127.0.0.1:8545",
        contract_address=CONTRACT_ADDRESS,
        poll_interval=0.05,
        error_backoff=0.05,
        max_backoff=0.4,
        failure_threshold=3,
        send_timeout=0.5,
        shutdown_grace=0.5,
    )
    defaults.update(overrides)
    return RelayConfig(**defaults)


@pytest.fixture
def test_config():
    """Default RelayConfig for tests."""
    return make_test_config()


@pytest.fixture
def state():
    return StateCache()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def broadcaster(state, registry):
    return Broadcaster(state, registry, send_timeout=0.5)


@pytest.fixture
def ledger():
    return MockLedger(height=100)


@pytest.fixture
def poller(ledger, broadcaster):
    """Poller wired to the mock ledger, with test-sized delays."""
    return LedgerEventPoller(
        ledger,
        broadcaster,
        poll_interval=0.05,
        error_backoff=0.05,
        max_backoff=0.4,
        failure_threshold=3,
    )


@pytest.fixture
def channels(registry):
    """Two healthy channels already registered."""
    a, b = FakeChannel("a"), FakeChannel("b")
    registry.register(a)
    registry.register(b)
    return a, b


async def eventually(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Wait until ``predicate()`` is truthy or fail the test."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail(f"condition not met within {timeout}s")
        await asyncio.sleep(interval)
