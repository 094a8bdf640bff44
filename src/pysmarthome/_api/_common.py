"""Shared helpers for the HTTP handler modules.

Errors are signalled by *raising* aiohttp HTTP exceptions, so a handler
can never carry on after rejecting a request. Responses are encoded
completely before anything is written.

It is internal to pysmarthome and may change at any time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from aiohttp import web
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from pysmarthome.exceptions import SerializationError

_logger = logging.getLogger(__name__)


def client_error(message: str) -> web.HTTPBadRequest:
    return web.HTTPBadRequest(text=f"{message}\n")


def not_found(message: str) -> web.HTTPNotFound:
    return web.HTTPNotFound(text=f"{message}\n")


def server_error(message: str) -> web.HTTPInternalServerError:
    return web.HTTPInternalServerError(text=f"{message}\n")


def _jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes, bytearray)):
        return [_jsonable(item) for item in payload]
    return payload


def encode_json(payload: Any) -> str:
    """Encode *payload* (models, lists of models, plain JSON values).

    Raises
    ------
    SerializationError
        If any part of the payload cannot be encoded.
    """
    try:
        return json.dumps(_jsonable(payload), separators=(",", ":"))
    except (TypeError, ValueError, PydanticSerializationError) as exc:
        raise SerializationError(f"Could not encode response: {exc}") from exc


def json_ok(payload: Any, *, endpoint: str) -> web.Response:
    """Build a ``200`` JSON response, or raise ``500`` if encoding fails."""
    try:
        body = encode_json(payload)
    except SerializationError as exc:
        _logger.error("Error marshalling response endpoint=%s error=%s", endpoint, exc)
        raise server_error("Error marshalling response") from exc
    return web.Response(text=body, content_type="application/json")
