"""Connection registry - the set of currently connected client channels."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable, TypeVar

from aiohttp import WSCloseCode

from dpp_relay.interfaces.channel import Channel

log = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionRegistry:
    """Concurrency-safe membership of live channels.

    The registry is the only place channels are removed from. Iteration always
    runs over a snapshot, so removals made while visiting never skip or revisit
    a member.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: set[Channel] = set()

    def register(self, channel: Channel) -> None:
        with self._lock:
            self._channels.add(channel)
            total = len(self._channels)
        log.info("Client connected (%d total)", total)

    def remove(self, channel: Channel) -> bool:
        """Drop a channel. Returns False if it was already gone."""
        with self._lock:
            if channel not in self._channels:
                return False
            self._channels.discard(channel)
            total = len(self._channels)
        log.info("Client removed (%d remaining)", total)
        return True

    def snapshot(self) -> tuple[Channel, ...]:
        with self._lock:
            return tuple(self._channels)

    async def for_each(
        self, fn: Callable[[Channel], Awaitable[T]],
    ) -> list[T | BaseException]:
        """Await ``fn`` for every channel registered at call time.

        Calls run concurrently. Results come back in snapshot order. A call
        that raises yields its exception in place of a result and never stops
        the others.
        """
        channels = self.snapshot()
        if not channels:
            return []
        results = await asyncio.gather(
            *(fn(ch) for ch in channels), return_exceptions=True,
        )
        for res in results:
            if isinstance(res, asyncio.CancelledError):
                raise res
            if isinstance(res, BaseException):
                log.error("Channel callback failed: %r", res)
        return list(results)

    async def close_all(self) -> None:
        """Close every registered channel with 'going away' and empty the set."""
        with self._lock:
            channels = tuple(self._channels)
            self._channels.clear()
        for ch in channels:
            try:
                await ch.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
            except Exception as exc:
                log.debug("Error closing channel during shutdown: %s", exc)
        if channels:
            log.info("Closed %d client channels", len(channels))

    def __contains__(self, channel: object) -> bool:
        with self._lock:
            return channel in self._channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)
