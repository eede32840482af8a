"""web3.py ledger client - reads PanelEventAdded logs from the registry contract."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import aiohttp
from web3 import AsyncWeb3, Web3
from web3.providers.rpc import AsyncHTTPProvider

from dpp_relay.ethereum.abi import EVENT_NAME, EVENT_SIGNATURE, PANEL_EVENT_ADDED_ABI
from dpp_relay.models.events import PanelEvent

log = logging.getLogger(__name__)

_TOPIC_PANEL_EVENT_ADDED = Web3.to_hex(Web3.keccak(text=EVENT_SIGNATURE))


def _as_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)


def _parse_log(event: Any, raw: Mapping[str, Any]) -> PanelEvent | None:
    """Decode one raw log into a PanelEvent.

    ``event`` is the contract event object used for ABI decoding. Returns None
    if the log was removed by a reorg, cannot be decoded, or lacks a panel id
    or event type.
    """
    block = raw.get("blockNumber")
    if raw.get("removed"):
        log.debug("Ignoring removed log in block %s", block)
        return None

    try:
        decoded = event.process_log(raw)
    except Exception as exc:
        log.warning("Could not decode %s log in block %s: %s", EVENT_NAME, block, exc)
        return None

    args = decoded["args"]
    panel_id = args.get("panelId")
    event_type = args.get("eventType")
    if not panel_id or not event_type:
        log.warning(
            "Skipping %s log in block %s: missing panelId/eventType", EVENT_NAME, block,
        )
        return None

    try:
        return PanelEvent(
            panel_id=str(panel_id),
            event_type=str(event_type),
            event_hash=_as_hex(args.get("eventHash", b"")),
            validated_by=str(args.get("validatedBy", "")),
            timestamp=int(args.get("timestamp", 0)),
            block_number=int(decoded["blockNumber"]),
            log_index=int(decoded.get("logIndex", 0)),
            tx_hash=_as_hex(decoded.get("transactionHash", "")),
        )
    except (TypeError, ValueError) as exc:
        log.warning("Failed to parse %s log in block %s: %s", EVENT_NAME, block, exc)
        return None


class Web3LedgerClient:
    """Async JSON-RPC access to the registry contract's event log.

    Uses eth_blockNumber for the head and eth_getLogs filtered on the
    PanelEventAdded topic for ranges. Each log is decoded separately so one
    malformed entry never discards the rest of the range.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        request_timeout: int = 30,
    ) -> None:
        self._w3 = AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            )
        )
        self._address = Web3.to_checksum_address(contract_address)
        contract = self._w3.eth.contract(address=self._address, abi=PANEL_EVENT_ADDED_ABI)
        self._event = contract.events[EVENT_NAME]()

    async def get_current_height(self) -> int:
        return int(await self._w3.eth.block_number)

    async def get_events(self, from_block: int, to_block: int) -> list[PanelEvent]:
        try:
            raw_logs = await self._w3.eth.get_logs({
                "address": self._address,
                "fromBlock": from_block,
                "toBlock": to_block,
                "topics": [_TOPIC_PANEL_EVENT_ADDED],
            })
        except Exception as exc:
            log.error("eth_getLogs %d-%d failed: %s", from_block, to_block, exc)
            raise

        events: list[PanelEvent] = []
        for raw in raw_logs:
            parsed = _parse_log(self._event, raw)
            if parsed is not None:
                events.append(parsed)
                log.debug(
                    "Parsed %s for panel %s at block %d",
                    EVENT_NAME, parsed.panel_id, parsed.block_number,
                )
        return events

    async def close(self) -> None:
        """Close the provider's underlying aiohttp session."""
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
