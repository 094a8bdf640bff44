"""Liveness probe."""

from __future__ import annotations

import logging

from aiohttp import web

from pysmarthome._constants import HEALTH_NOT_OK, HEALTH_OK
from pysmarthome._context import HUB_KEY
from pysmarthome.exceptions import StoreError

_logger = logging.getLogger(__name__)


async def health_check(request: web.Request) -> web.Response:
    """``GET /hc``: ``OK`` when the store answers, ``NOT_OK`` otherwise."""
    _logger.info("Got HealthCheck GET request")
    token = HEALTH_OK
    try:
        await request.app[HUB_KEY].store.ping()
    except StoreError as exc:
        token = HEALTH_NOT_OK
        _logger.error("Could not connect to the store: %s", exc)
    return web.Response(text=f"{token}\n")
