"""Device state, record and uptime models."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import Field, StrictBool, ValidationError

from pysmarthome.exceptions import SerializationError
from pysmarthome.models._base import DeviceId, HubBaseModel


class DeviceStateSnapshot(HubBaseModel):
    """Point-in-time mapping from device identifier to on/off state.

    A snapshot is built fresh by the store on every fetch and never
    mutated afterwards. :meth:`serialize` produces the wire form that is
    obfuscated and pushed to the controller::

        {"fan":false,"lamp":true}

    Keys are sorted and non-ASCII characters are escaped, so the same
    mapping always serializes to the same ASCII text.
    """

    states: dict[DeviceId, StrictBool] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, states: Mapping[str, bool]) -> DeviceStateSnapshot:
        return cls(states=dict(states))

    def as_dict(self) -> dict[str, bool]:
        return dict(self.states)

    def serialize(self) -> str:
        """Return the compact JSON wire representation.

        Raises
        ------
        SerializationError
            If the mapping cannot be encoded.
        """
        try:
            return json.dumps(self.states, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Could not serialize device states: {exc}") from exc

    @classmethod
    def parse(cls, text: str) -> DeviceStateSnapshot:
        """Rebuild a snapshot from its wire representation."""
        try:
            data: Any = json.loads(text)
            return cls(states=data)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise SerializationError(f"Invalid device state payload: {text[:64]!r}") from exc


class RecordRequest(HubBaseModel):
    """Body of ``POST /addRecord``.

    Parameters
    ----------
    device : str
        Identifier of a registered device.
    state : bool
        New on/off state. Must be a JSON boolean; ``0``/``"true"`` are rejected.
    """

    device: DeviceId
    state: StrictBool


class DeviceRecord(HubBaseModel):
    """A stored on/off transition."""

    id: int = Field(..., ge=1)
    device: DeviceId
    date: str = Field(..., description="UTC ISO-8601 time the record was stored")
    state: bool


class DeviceUptime(HubBaseModel):
    """Accumulated ON time of a device over its recorded history."""

    device: DeviceId
    uptime: float = Field(..., ge=0, description="Seconds spent in the ON state")
