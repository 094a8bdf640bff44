"""Device listing and uptime aggregation handlers."""

from __future__ import annotations

import logging

from aiohttp import web

from pysmarthome._api._common import json_ok, server_error
from pysmarthome._context import HUB_KEY
from pysmarthome.exceptions import StoreError

_logger = logging.getLogger(__name__)


async def get_devices(request: web.Request) -> web.Response:
    _logger.info("Got GetDevices request")
    try:
        devices = await request.app[HUB_KEY].store.get_distinct_devices()
    except StoreError as exc:
        _logger.error("Error getting devices: %s", exc)
        raise server_error("Error getting record from the database") from exc
    return json_ok(devices, endpoint="getDevices")


async def get_devices_uptime(request: web.Request) -> web.Response:
    _logger.info("Got GetDevicesUptime request")
    try:
        uptimes = await request.app[HUB_KEY].store.get_devices_uptime()
    except StoreError as exc:
        _logger.error("Error getting devices uptime: %s", exc)
        raise server_error("Error getting record from the database") from exc
    return json_ok(uptimes, endpoint="getDevicesUptime")
