"""aiohttp application - WebSocket upgrades plus the read-only HTTP routes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from aiohttp import WSMsgType, web

from dpp_relay.models.snapshots import RelayHealth
from dpp_relay.relay.poller import LedgerEventPoller
from dpp_relay.relay.registry import ConnectionRegistry
from dpp_relay.relay.state import StateCache

log = logging.getLogger(__name__)

FALLBACK_TEXT = "dpp_relay is running!"

STATE_KEY = web.AppKey("state", StateCache)
REGISTRY_KEY = web.AppKey("registry", ConnectionRegistry)
POLLER_KEY = web.AppKey("poller", LedgerEventPoller)


async def handle_test(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "success",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


async def handle_visibility(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    return web.json_response(dict(state.snapshot()))


async def handle_health(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    poller_health = request.app[POLLER_KEY].health()
    health = RelayHealth(
        poller=poller_health,
        clients=len(request.app[REGISTRY_KEY]),
        panels=len(state),
        last_update=state.last_updated,
    )
    return web.json_response(health.to_dict(), status=200 if poller_health.healthy else 503)


async def handle_websocket(request: web.Request, ws: web.WebSocketResponse) -> web.WebSocketResponse:
    """Register the client and hold the socket open until it closes."""
    registry = request.app[REGISTRY_KEY]
    await ws.prepare(request)
    registry.register(ws)
    log.info("WebSocket client connected from %s", request.remote)
    try:
        async for msg in ws:
            # Clients have nothing to say; reading keeps close frames flowing.
            if msg.type == WSMsgType.ERROR:
                log.warning("WebSocket error from %s: %s", request.remote, ws.exception())
    finally:
        registry.remove(ws)
    return ws


@web.middleware
async def websocket_upgrade(request: web.Request, handler) -> web.StreamResponse:
    """Upgrade WebSocket requests on any path, ahead of route matching."""
    ws = web.WebSocketResponse()
    if ws.can_prepare(request).ok:
        return await handle_websocket(request, ws)
    return await handler(request)


async def handle_default(request: web.Request) -> web.Response:
    return web.Response(text=FALLBACK_TEXT, content_type="text/plain")


async def _on_shutdown(app: web.Application) -> None:
    await app[REGISTRY_KEY].close_all()


def create_app(
    state: StateCache,
    registry: ConnectionRegistry,
    poller: LedgerEventPoller,
) -> web.Application:
    app = web.Application(middlewares=[websocket_upgrade])
    app[STATE_KEY] = state
    app[REGISTRY_KEY] = registry
    app[POLLER_KEY] = poller

    app.router.add_get("/api/test", handle_test)
    app.router.add_get("/api/visibility", handle_visibility)
    app.router.add_get("/api/health", handle_health)
    app.router.add_route("*", "/{tail:.*}", handle_default)

    app.on_shutdown.append(_on_shutdown)
    return app
