"""Custom exception hierarchy for pysmarthome."""

from __future__ import annotations


class SmartHomeError(Exception):
    """Base exception for all pysmarthome errors."""


class HubConfigError(SmartHomeError):
    """Invalid or missing configuration."""


class ClientError(SmartHomeError):
    """Request rejected because of something the caller sent.

    Raised for malformed bodies and references to unknown devices.
    HTTP handlers turn it into a ``400`` and stop processing the request.
    """

    def __init__(self, message: str, *, status: int = 400) -> None:
        self.status = status
        super().__init__(message)


class UnknownDeviceError(ClientError):
    """The referenced device is not registered in the store."""

    def __init__(self, device: str) -> None:
        self.device = device
        super().__init__(f"Device {device!r} does not exist")


class StoreError(SmartHomeError):
    """The device/record backend failed."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class RecordNotFoundError(StoreError):
    """A known device has no stored record yet."""


class SerializationError(SmartHomeError):
    """A response or snapshot could not be encoded.

    Nothing is written when this is raised; callers must not fall back
    to an empty or partial body.
    """


class SyncConnectionError(SmartHomeError):
    """Transport-level failure on a synchronization connection.

    Always fatal to the affected :class:`~pysmarthome.sync.loop.SyncLoop`
    and never to the process.
    """

    def __init__(self, message: str, *, remote: str = "") -> None:
        self.remote = remote
        super().__init__(message)


class PeerClosedError(SyncConnectionError):
    """The controller closed or reset the connection."""


class ConnectionTimeoutError(SyncConnectionError):
    """No message arrived before the read deadline expired."""


class ConnectionCancelledError(SyncConnectionError):
    """The connection's cancellation token was set (e.g. on shutdown)."""
