"""Channel protocol - one connected client that accepts pushed text frames.

aiohttp's ``WebSocketResponse`` satisfies it as-is.
"""

from __future__ import annotations

from typing import Protocol


class Channel(Protocol):
    @property
    def closed(self) -> bool:
        ...

    async def send_str(self, data: str) -> None:
        ...

    async def close(self, *, code: int = ..., message: bytes = ...) -> bool:
        ...
