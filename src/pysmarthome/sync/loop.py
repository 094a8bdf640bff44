"""Request-driven poll-and-push loop for one controller connection.

Every message the controller sends triggers exactly one store fetch and
at most one push of the obfuscated snapshot::

    AWAITING_MESSAGE -> FETCHING -> OBFUSCATING -> SENDING -> AWAITING_MESSAGE

Any read, fetch or write failure moves the loop to ``CLOSED`` and
:meth:`SyncLoop.run` returns. Releasing the connection is the caller's job.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pysmarthome._constants import HEARTBEAT
from pysmarthome._crypto import PayloadObfuscator
from pysmarthome._redact import redact_for_log
from pysmarthome.exceptions import (
    ConnectionCancelledError,
    ConnectionTimeoutError,
    PeerClosedError,
    SerializationError,
    StoreError,
    SyncConnectionError,
)
from pysmarthome.state.store import DeviceStore
from pysmarthome.sync.connection import SyncConnection

_logger = logging.getLogger(__name__)


class SyncState(StrEnum):
    AWAITING_MESSAGE = "awaiting_message"
    FETCHING = "fetching"
    OBFUSCATING = "obfuscating"
    SENDING = "sending"
    CLOSED = "closed"


class SyncLoop:
    """Owns one upgraded connection until its first unrecovered error."""

    def __init__(
        self,
        connection: SyncConnection,
        store: DeviceStore,
        obfuscator: PayloadObfuscator,
        *,
        log_messages_max: int = 512,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connection = connection
        self._store = store
        self._obfuscator = obfuscator
        self._log_messages_max = log_messages_max
        self._logger = logger or _logger
        self._state = SyncState.AWAITING_MESSAGE
        self._pushes = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def pushes(self) -> int:
        """Number of snapshots written so far."""
        return self._pushes

    async def _read_message(self) -> str | None:
        """Wait for the next client message; ``None`` means the loop must stop.

        Peer close and timeout are warnings, cancellation is info, any other
        transport failure is an error. All of them end the loop.
        """
        remote = self._connection.remote
        try:
            return await self._connection.receive_text()
        except ConnectionCancelledError:
            self._logger.info("Controller connection cancelled remote=%s", remote)
        except PeerClosedError as exc:
            self._logger.warning("Controller disconnected remote=%s reason=%s", remote, exc)
        except ConnectionTimeoutError as exc:
            self._logger.warning("Controller timed out remote=%s reason=%s", remote, exc)
        except SyncConnectionError as exc:
            self._logger.error("Error reading message remote=%s error=%s", remote, exc)
        return None

    async def run(self) -> None:
        """Serve the connection until a read, fetch or write fails."""
        remote = self._connection.remote
        try:
            while True:
                self._state = SyncState.AWAITING_MESSAGE
                message = await self._read_message()
                if message is None:
                    return
                if message != HEARTBEAT:
                    self._logger.info(
                        "Received message from client client=%s message=%s",
                        remote,
                        redact_for_log(message, max_string=self._log_messages_max),
                    )

                self._state = SyncState.FETCHING
                try:
                    snapshot = await self._store.get_states()
                except StoreError as exc:
                    self._logger.error("Error getting device states from store: %s", exc)
                    return

                self._state = SyncState.OBFUSCATING
                try:
                    payload = self._obfuscator.obfuscate(snapshot.serialize())
                except SerializationError as exc:
                    self._logger.error("Error serializing device states: %s", exc)
                    return

                self._state = SyncState.SENDING
                try:
                    await self._connection.send_text(payload)
                except SyncConnectionError as exc:
                    self._logger.error("Error writing message remote=%s error=%s", remote, exc)
                    return
                self._pushes += 1
        finally:
            self._state = SyncState.CLOSED
