"""aiohttp application factory for the hub."""

from __future__ import annotations

import logging

from aiohttp import web

from pysmarthome._api import devices as _devices_api
from pysmarthome._api import health as _health_api
from pysmarthome._api import records as _records_api
from pysmarthome._context import HUB_KEY, HubContext
from pysmarthome._crypto import PayloadObfuscator, XorObfuscator
from pysmarthome.config import HubConfig
from pysmarthome.state.store import DeviceStore
from pysmarthome.sync.upgrader import handle_client

_logger = logging.getLogger(__name__)


async def _cancel_sync_loops(app: web.Application) -> None:
    cancelled = app[HUB_KEY].cancel_all()
    if cancelled:
        _logger.info("Cancelled %d controller connection(s) on shutdown", cancelled)


def build_app(
    config: HubConfig,
    store: DeviceStore,
    *,
    obfuscator: PayloadObfuscator | None = None,
) -> web.Application:
    """Create the hub application.

    Parameters
    ----------
    config : HubConfig
        Server configuration.
    store : DeviceStore
        Shared device/record store.
    obfuscator : PayloadObfuscator, optional
        Transform for pushed snapshots. Defaults to an
        :class:`~pysmarthome._crypto.xor.XorObfuscator` keyed with
        ``config.obfuscation_key``.

    Returns
    -------
    aiohttp.web.Application
        Application with all routes registered.
    """
    if obfuscator is None:
        obfuscator = XorObfuscator(config.obfuscation_key)

    app = web.Application()
    app[HUB_KEY] = HubContext(config=config, store=store, obfuscator=obfuscator)

    app.router.add_post("/addRecord", _records_api.add_record)
    app.router.add_get("/getLastByDevice/{device}", _records_api.get_last_by_device)
    app.router.add_get("/getDevices", _devices_api.get_devices)
    app.router.add_get("/getDevicesUptime", _devices_api.get_devices_uptime)
    app.router.add_get("/hc", _health_api.health_check)
    app.router.add_get(config.ws_path, handle_client)

    app.on_shutdown.append(_cancel_sync_loops)
    return app
