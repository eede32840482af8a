"""Main daemon - wires all components together and owns their lifecycle."""

from __future__ import annotations

import asyncio
import logging
import signal

from aiohttp import web

from dpp_relay.api.server import create_app
from dpp_relay.ethereum.client import Web3LedgerClient
from dpp_relay.interfaces.ledger import LedgerClient
from dpp_relay.models.config import RelayConfig
from dpp_relay.relay.broadcaster import Broadcaster
from dpp_relay.relay.poller import LedgerEventPoller
from dpp_relay.relay.registry import ConnectionRegistry
from dpp_relay.relay.state import StateCache

log = logging.getLogger(__name__)


class RelayDaemon:
    """Bridges contract events to connected WebSocket clients.

    Runs the HTTP/WebSocket listener and the poll loop concurrently. They share
    only the state cache and the connection registry.
    """

    def __init__(self, cfg: RelayConfig, ledger: LedgerClient | None = None) -> None:
        self._cfg = cfg
        self._stop = asyncio.Event()
        self._runner: web.AppRunner | None = None

        # Core components
        self.state = StateCache()
        self.registry = ConnectionRegistry()
        self.ledger: LedgerClient = ledger or Web3LedgerClient(
            cfg.rpc_url, cfg.contract_address, cfg.request_timeout,
        )
        self.broadcaster = Broadcaster(self.state, self.registry, cfg.send_timeout)
        self.poller = LedgerEventPoller(
            self.ledger,
            self.broadcaster,
            poll_interval=cfg.poll_interval,
            error_backoff=cfg.error_backoff,
            max_backoff=cfg.max_backoff,
            failure_threshold=cfg.failure_threshold,
            start_block=cfg.start_block,
        )
        self.app = create_app(self.state, self.registry, self.poller)

    async def start(self) -> None:
        """Bind the listener, run the poll loop, and block until stopped."""
        log.info("Starting dpp_relay daemon")
        log.info("  Listen:   %s:%d", self._cfg.host, self._cfg.port)
        log.info("  RPC:      %s", self._cfg.rpc_url)
        log.info("  Contract: %s", self._cfg.contract_address)
        log.info("  Interval: %ss", self._cfg.poll_interval)

        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._cfg.host, self._cfg.port)
        try:
            await site.start()
        except OSError as exc:
            log.critical("Cannot listen on %s:%d: %s", self._cfg.host, self._cfg.port, exc)
            await self._runner.cleanup()
            await self.ledger.close()
            raise
        log.info("WebSocket server listening on http://%s:%d/", self._cfg.host, self._cfg.port)

        poll_task = asyncio.create_task(self.poller.run(self._stop), name="dpp-relay-poller")
        stop_task = asyncio.create_task(self._stop.wait(), name="dpp-relay-stop")
        try:
            done, _ = await asyncio.wait(
                {poll_task, stop_task}, return_when=asyncio.FIRST_COMPLETED,
            )
            if poll_task in done and not poll_task.cancelled() and not self._stop.is_set():
                log.error("Poll loop exited unexpectedly: %s", poll_task.exception())
        finally:
            stop_task.cancel()
            await self._shutdown(poll_task)

    async def stop(self) -> None:
        """Signal the daemon to stop gracefully."""
        log.info("Stop requested")
        self._stop.set()

    async def _shutdown(self, poll_task: asyncio.Task) -> None:
        self._stop.set()

        if not poll_task.done():
            if not self.poller.broadcasting:
                # Idle or waiting on the ledger: nothing worth finishing.
                poll_task.cancel()
            done, _ = await asyncio.wait({poll_task}, timeout=self._cfg.shutdown_grace)
            if not done:
                log.warning(
                    "Broadcast still in flight after %ss grace period, cancelling",
                    self._cfg.shutdown_grace,
                )
                poll_task.cancel()
        await asyncio.gather(poll_task, return_exceptions=True)

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        await self.ledger.close()
        log.info("Daemon shut down cleanly (cursor: %s)", self.poller.cursor)


async def run_daemon(cfg: RelayConfig) -> None:
    """Entry point for running the daemon."""
    daemon = RelayDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
