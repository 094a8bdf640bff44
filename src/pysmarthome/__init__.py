"""pysmarthome - Async home-automation hub with a controller sync channel."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysmarthome")
except PackageNotFoundError:
    __version__ = "0+local"
from pysmarthome._crypto import PayloadObfuscator, XorObfuscator
from pysmarthome.app import build_app
from pysmarthome.config import HubConfig
from pysmarthome.exceptions import (
    ClientError,
    ConnectionCancelledError,
    ConnectionTimeoutError,
    HubConfigError,
    PeerClosedError,
    RecordNotFoundError,
    SerializationError,
    SmartHomeError,
    StoreError,
    SyncConnectionError,
    UnknownDeviceError,
)
from pysmarthome.models import DeviceRecord, DeviceStateSnapshot, DeviceUptime, RecordRequest
from pysmarthome.state import DeviceStore, MemoryDeviceStore
from pysmarthome.sync.connection import CancellationToken
from pysmarthome.sync.loop import SyncLoop, SyncState

__all__ = [
    "__version__",
    "CancellationToken",
    "ClientError",
    "ConnectionCancelledError",
    "ConnectionTimeoutError",
    "DeviceRecord",
    "DeviceStateSnapshot",
    "DeviceStore",
    "DeviceUptime",
    "HubConfig",
    "HubConfigError",
    "MemoryDeviceStore",
    "PayloadObfuscator",
    "PeerClosedError",
    "RecordNotFoundError",
    "RecordRequest",
    "SerializationError",
    "SmartHomeError",
    "StoreError",
    "SyncConnectionError",
    "SyncLoop",
    "SyncState",
    "UnknownDeviceError",
    "XorObfuscator",
    "build_app",
]
