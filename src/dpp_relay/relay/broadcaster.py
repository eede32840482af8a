"""Broadcaster - applies an event to the state cache and fans it out."""

from __future__ import annotations

import asyncio
import json
import logging

from dpp_relay.interfaces.channel import Channel
from dpp_relay.models.events import PanelEvent
from dpp_relay.models.records import BroadcastResult
from dpp_relay.relay.registry import ConnectionRegistry
from dpp_relay.relay.state import StateCache

log = logging.getLogger(__name__)


def encode_notification(event: PanelEvent) -> str:
    """Serialize the client-facing notification as compact JSON."""
    return json.dumps(event.to_notification(), separators=(",", ":"))


class Broadcaster:
    """Delivers each event to every registered channel, best effort.

    A channel that is closed, raises, or exceeds ``send_timeout`` is pruned
    from the registry. Push failures never propagate to the caller.
    """

    def __init__(
        self,
        state: StateCache,
        registry: ConnectionRegistry,
        send_timeout: float = 5,
    ) -> None:
        self._state = state
        self._registry = registry
        self._send_timeout = send_timeout

    async def handle(self, event: PanelEvent) -> BroadcastResult:
        if not event.panel_id or not event.event_type:
            raise ValueError(f"malformed event at block {event.block_number}: {event!r}")

        self._state.set(event.panel_id, event.event_type)
        payload = encode_notification(event)

        outcomes = await self._registry.for_each(lambda ch: self._push(ch, payload))
        result = BroadcastResult(
            panel_id=event.panel_id,
            delivered=sum(1 for ok in outcomes if ok is True),
            failed=sum(1 for ok in outcomes if ok is not True),
        )
        log.info(
            "PanelEventAdded: panel=%s type=%s delivered=%d failed=%d",
            event.panel_id, event.event_type, result.delivered, result.failed,
        )
        return result

    async def _push(self, channel: Channel, payload: str) -> bool:
        if channel.closed:
            self._registry.remove(channel)
            return False
        try:
            await asyncio.wait_for(channel.send_str(payload), timeout=self._send_timeout)
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            log.warning("Client write timed out after %ss, dropping", self._send_timeout)
            self._registry.remove(channel)
            return False
        except Exception as exc:
            log.warning("Client write failed, dropping: %s", exc)
            self._registry.remove(channel)
            return False
        return True
