"""Data models for hub requests, responses and pushed snapshots."""

from pysmarthome.models._base import DeviceId, HubBaseModel, normalize_device_id
from pysmarthome.models.device import DeviceRecord, DeviceStateSnapshot, DeviceUptime, RecordRequest

__all__ = [
    "DeviceId",
    "DeviceRecord",
    "DeviceStateSnapshot",
    "DeviceUptime",
    "HubBaseModel",
    "RecordRequest",
    "normalize_device_id",
]
