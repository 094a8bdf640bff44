"""Upgrade entry point for controller connections."""

from __future__ import annotations

import logging

from aiohttp import web

from pysmarthome._context import HUB_KEY, HubContext
from pysmarthome.sync.connection import CancellationToken, SyncConnection, WebSocketConnection
from pysmarthome.sync.loop import SyncLoop

_logger = logging.getLogger(__name__)


async def serve_connection(connection: SyncConnection, hub: HubContext) -> SyncLoop:
    """Run a :class:`SyncLoop` on *connection* and always release it afterwards."""
    loop = SyncLoop(
        connection,
        hub.store,
        hub.obfuscator,
        log_messages_max=hub.config.log_messages_max,
    )
    try:
        await loop.run()
    finally:
        await connection.close()
        _logger.info("Controller connection closed remote=%s pushes=%d", connection.remote, loop.pushes)
    return loop


async def handle_client(request: web.Request) -> web.StreamResponse:
    """Handle ``GET /smart-home``: upgrade and serve one controller.

    A failed upgrade is logged and the error response produced by aiohttp's
    handshake is returned unchanged; no loop is started.
    """
    hub = request.app[HUB_KEY]
    remote = request.remote or "unknown"
    _logger.info("Controller tries to connect remote=%s", remote)

    ws = web.WebSocketResponse()
    try:
        await ws.prepare(request)
    except web.HTTPException as exc:
        _logger.error("Error upgrading connection remote=%s error=%s", remote, exc.reason)
        raise

    token = CancellationToken()
    connection = WebSocketConnection(
        ws,
        remote=remote,
        read_timeout=hub.config.read_timeout,
        token=token,
    )
    _logger.info("Controller connected remote=%s", remote)
    hub.tokens.add(token)
    try:
        await serve_connection(connection, hub)
    finally:
        hub.tokens.discard(token)
    return ws
