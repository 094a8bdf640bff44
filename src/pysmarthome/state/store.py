"""Device/record store contract and its in-memory implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from pysmarthome.exceptions import RecordNotFoundError, StoreError, UnknownDeviceError
from pysmarthome.models.device import DeviceRecord, DeviceStateSnapshot, DeviceUptime

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DeviceStore(Protocol):
    """Structural store interface consumed by the sync loop and HTTP handlers.

    Implementations must tolerate any number of concurrent readers; callers
    never lock around these calls. Backend failures raise
    :class:`~pysmarthome.exceptions.StoreError`.
    """

    async def get_states(self) -> DeviceStateSnapshot: ...

    async def device_exists(self, device: str) -> bool: ...

    async def add_record(self, device: str, state: bool) -> DeviceRecord: ...

    async def get_last_by_device(self, device: str) -> DeviceRecord: ...

    async def get_distinct_devices(self) -> list[str]: ...

    async def get_devices_uptime(self) -> list[DeviceUptime]: ...

    async def ping(self) -> None: ...


class _StoredRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: DeviceRecord
    recorded_at: datetime


class _DeviceHistory(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: bool = False
    records: list[_StoredRecord] = Field(default_factory=list)


def _uptime_seconds(records: Iterable[_StoredRecord], now: datetime) -> float:
    """Sum the time between each ON record and the next OFF record.

    A device whose last record is ON accrues time up to *now*.
    """
    total = 0.0
    on_since: datetime | None = None
    for stored in records:
        if stored.record.state:
            if on_since is None:
                on_since = stored.recorded_at
        elif on_since is not None:
            total += (stored.recorded_at - on_since).total_seconds()
            on_since = None
    if on_since is not None:
        total += max(0.0, (now - on_since).total_seconds())
    return total


class MemoryDeviceStore:
    """In-memory :class:`DeviceStore`.

    Devices must be registered before records can be stored for them.
    All reads return fresh copies, and none of the coroutines await between
    reading and writing internal state, so concurrent loops on one event
    loop always observe a consistent view.
    """

    def __init__(
        self,
        devices: Iterable[str] = (),
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._devices: dict[str, _DeviceHistory] = {}
        self._next_id = 1
        self._available = True
        for device in devices:
            self.register_device(device)

    def register_device(self, device: str, *, state: bool = False) -> None:
        """Make *device* known to the store with an initial *state*."""
        device = device.strip()
        if not device:
            raise ValueError("device must be non-empty")
        history = self._devices.get(device)
        if history is None:
            self._devices[device] = _DeviceHistory(state=state)
            _logger.debug("Registered device %s state=%s", device, state)

    def set_available(self, available: bool) -> None:
        """Simulate the backend going away (``False``) or coming back."""
        self._available = available

    def _check(self, operation: str) -> None:
        if not self._available:
            raise StoreError(f"Store unavailable during {operation}", operation=operation)

    def _history(self, device: str) -> _DeviceHistory:
        history = self._devices.get(device)
        if history is None:
            raise UnknownDeviceError(device)
        return history

    async def get_states(self) -> DeviceStateSnapshot:
        self._check("get_states")
        return DeviceStateSnapshot(states={device: history.state for device, history in self._devices.items()})

    async def device_exists(self, device: str) -> bool:
        self._check("device_exists")
        return device in self._devices

    async def add_record(self, device: str, state: bool) -> DeviceRecord:
        self._check("add_record")
        history = self._history(device)
        now = self._clock()
        record = DeviceRecord(
            id=self._next_id,
            device=device,
            date=now.isoformat(),
            state=state,
        )
        self._next_id += 1
        history.records.append(_StoredRecord(record=record, recorded_at=now))
        history.state = state
        return record

    async def get_last_by_device(self, device: str) -> DeviceRecord:
        self._check("get_last_by_device")
        history = self._history(device)
        if not history.records:
            raise RecordNotFoundError(
                f"No record stored for device {device!r}",
                operation="get_last_by_device",
            )
        return history.records[-1].record

    async def get_distinct_devices(self) -> list[str]:
        self._check("get_distinct_devices")
        return sorted(device for device, history in self._devices.items() if history.records)

    async def get_devices_uptime(self) -> list[DeviceUptime]:
        self._check("get_devices_uptime")
        now = self._clock()
        return [
            DeviceUptime(device=device, uptime=_uptime_seconds(history.records, now))
            for device, history in sorted(self._devices.items())
            if history.records
        ]

    async def ping(self) -> None:
        self._check("ping")
