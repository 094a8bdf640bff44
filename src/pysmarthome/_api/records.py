"""Record ingestion and last-record lookup handlers."""

from __future__ import annotations

import logging

from aiohttp import web

from pysmarthome._api._common import client_error, json_ok, not_found, server_error
from pysmarthome._context import HUB_KEY
from pysmarthome.exceptions import RecordNotFoundError, StoreError, UnknownDeviceError
from pysmarthome.models.device import RecordRequest

_logger = logging.getLogger(__name__)


async def add_record(request: web.Request) -> web.Response:
    """``POST /addRecord``: store an on/off transition for a known device."""
    _logger.info("Got AddRecord POST request")
    store = request.app[HUB_KEY].store

    try:
        event = RecordRequest.model_validate(await request.json())
    except ValueError as exc:
        # Covers invalid JSON, bad encoding and pydantic validation errors.
        raise client_error("Error unmarshalling request body") from exc
    _logger.info("Request body device=%s state=%s", event.device, event.state)

    try:
        if not await store.device_exists(event.device):
            raise client_error("Error this device does not exist")
        record = await store.add_record(event.device, event.state)
    except UnknownDeviceError as exc:
        raise client_error("Error this device does not exist") from exc
    except StoreError as exc:
        _logger.error("Error adding record to the store: %s device=%s state=%s", exc, event.device, event.state)
        raise server_error("Error adding record to the database") from exc

    return json_ok(record, endpoint="addRecord")


async def get_last_by_device(request: web.Request) -> web.Response:
    """``GET /getLastByDevice/{device}``: most recent record of one device."""
    device = request.match_info["device"].strip()
    _logger.info("Got GetLastByDevice GET request device=%s", device)
    store = request.app[HUB_KEY].store

    try:
        if not device or not await store.device_exists(device):
            raise client_error("Error this device does not exist")
        record = await store.get_last_by_device(device)
    except UnknownDeviceError as exc:
        raise client_error("Error this device does not exist") from exc
    except RecordNotFoundError as exc:
        raise not_found("Error no record stored for this device") from exc
    except StoreError as exc:
        _logger.error("Error getting record from the store: %s device=%s", exc, device)
        raise server_error("Error getting record from the database") from exc

    return json_ok(record, endpoint="getLastByDevice")
