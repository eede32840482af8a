"""Ledger event poller - discovers new PanelEventAdded logs block range by block range."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from dpp_relay.interfaces.ledger import LedgerClient
from dpp_relay.models.records import PollResult
from dpp_relay.models.snapshots import PollerHealth
from dpp_relay.relay.broadcaster import Broadcaster

log = logging.getLogger(__name__)


class LedgerEventPoller:
    """Polls the ledger on a fixed interval and feeds new events to the broadcaster.

    Each iteration:
    1. Queries the current head block
    2. Returns early if nothing past the cursor exists
    3. Fetches events in [cursor + 1, head] and hands them over in ledger order
    4. Advances the cursor to head once the whole batch has been handled

    The cursor only moves after a successful iteration. Failed iterations are
    retried with exponential backoff capped at ``max_backoff``.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        broadcaster: Broadcaster,
        poll_interval: float = 10,
        error_backoff: float | None = None,
        max_backoff: float = 300,
        failure_threshold: int = 3,
        start_block: int | None = None,
    ) -> None:
        self._ledger = ledger
        self._broadcaster = broadcaster
        self._poll_interval = poll_interval
        self._error_backoff = poll_interval if error_backoff is None else error_backoff
        self._max_backoff = max_backoff
        self._failure_threshold = failure_threshold
        self._start_block = start_block

        self._cursor: int | None = None
        self._consecutive_failures = 0
        self._last_success_at: str | None = None
        self._last_error: str | None = None
        self._next_delay = poll_interval
        self._broadcasting = False

    @property
    def cursor(self) -> int | None:
        return self._cursor

    @property
    def broadcasting(self) -> bool:
        """True while a fetched batch is being handed to the broadcaster."""
        return self._broadcasting

    async def initialize(self) -> int:
        """Position the cursor before the first poll.

        Without a configured start block, everything up to the current head is
        considered already seen.
        """
        if self._start_block is not None:
            self._cursor = self._start_block - 1
            log.info("Starting from configured block %d", self._start_block)
        else:
            self._cursor = await self._ledger.get_current_height()
            log.info("No start block, starting after current head %d", self._cursor)
        return self._cursor

    async def poll_once(self) -> PollResult:
        """Run a single Polling step. Raises on ledger failure."""
        if self._cursor is None:
            await self.initialize()
        cursor = self._cursor

        head = await self._ledger.get_current_height()
        if head <= cursor:
            log.debug("No new blocks (head %d, cursor %d)", head, cursor)
            return PollResult(from_block=cursor + 1, to_block=head)

        events = await self._ledger.get_events(cursor + 1, head)
        result = PollResult(from_block=cursor + 1, to_block=head, events=len(events))

        self._broadcasting = True
        try:
            for event in events:
                try:
                    outcome = await self._broadcaster.handle(event)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    log.error("Skipping event at block %d: %s", event.block_number, exc)
                    result.skipped += 1
                    continue
                result.delivered += outcome.delivered
                result.failed += outcome.failed
        finally:
            self._broadcasting = False

        self._cursor = head
        if events:
            log.info(
                "Processed %d events in blocks %d-%d (cursor: %d)",
                len(events), result.from_block, head, head,
            )
        return result

    async def run(self, stop: asyncio.Event) -> None:
        """Poll until ``stop`` is set. The interval wait ends as soon as it is."""
        log.info("Listening for PanelEventAdded events")
        while not stop.is_set():
            try:
                if self._cursor is None:
                    await self.initialize()
                else:
                    await self.poll_once()
            except asyncio.CancelledError:
                log.info("Poll loop cancelled")
                raise
            except Exception as exc:
                self._next_delay = self._record_failure(exc)
            else:
                self._record_success()
                self._next_delay = self._poll_interval

            try:
                await asyncio.wait_for(stop.wait(), timeout=self._next_delay)
            except asyncio.TimeoutError:
                pass
        log.info("Poll loop stopped (cursor: %s)", self._cursor)

    def health(self) -> PollerHealth:
        return PollerHealth(
            cursor=self._cursor,
            consecutive_failures=self._consecutive_failures,
            last_success_at=self._last_success_at,
            last_error=self._last_error,
            healthy=self._consecutive_failures < self._failure_threshold,
            next_poll_in=self._next_delay,
        )

    def backoff_delay(self, failures: int) -> float:
        """Wait before the next attempt after ``failures`` consecutive failures."""
        if failures <= 0:
            return self._poll_interval
        return min(self._error_backoff * 2 ** (failures - 1), self._max_backoff)

    def _record_failure(self, exc: Exception) -> float:
        self._consecutive_failures += 1
        self._last_error = str(exc) or type(exc).__name__
        delay = self.backoff_delay(self._consecutive_failures)
        log.error(
            "Ledger poll failed (attempt %d, retry in %.1fs): %s",
            self._consecutive_failures, delay, self._last_error,
        )
        if self._consecutive_failures == self._failure_threshold:
            log.warning(
                "Poller unhealthy: %d consecutive failures, state is going stale",
                self._consecutive_failures,
            )
        return delay

    def _record_success(self) -> None:
        if self._consecutive_failures >= self._failure_threshold:
            log.info("Poller recovered after %d failures", self._consecutive_failures)
        self._consecutive_failures = 0
        self._last_error = None
        self._last_success_at = datetime.now(timezone.utc).isoformat()
