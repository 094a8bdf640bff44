"""Message-framed connections used by the synchronization loop.

:class:`WebSocketConnection` adapts an upgraded aiohttp
:class:`~aiohttp.web.WebSocketResponse` to the small
:class:`SyncConnection` protocol and turns every way a read or write can
fail into a typed :class:`~pysmarthome.exceptions.SyncConnectionError`.
The loop never inspects error messages.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp
from aiohttp import web

from pysmarthome.exceptions import (
    ConnectionCancelledError,
    ConnectionTimeoutError,
    PeerClosedError,
    SyncConnectionError,
)

_logger = logging.getLogger(__name__)

_CLOSED_TYPES = frozenset({aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED})


class CancellationToken:
    """One-shot signal asking a single connection to stop.

    Setting the token wakes a pending read; the loop then terminates as if
    the connection had failed.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


class SyncConnection(Protocol):
    """Structural connection interface used by :class:`~pysmarthome.sync.loop.SyncLoop`.

    Having a protocol here makes it easy to drive the loop with test doubles
    while keeping the production adapter (:class:`WebSocketConnection`)
    concrete.
    """

    @property
    def remote(self) -> str: ...

    async def receive_text(self) -> str: ...

    async def send_text(self, data: str) -> None: ...

    async def close(self) -> None: ...


def classify_os_error(exc: BaseException, *, remote: str) -> SyncConnectionError:
    """Map a transport exception onto the peer-closed / timed-out / other split."""
    if isinstance(exc, SyncConnectionError):
        return exc
    if isinstance(exc, (ConnectionResetError, BrokenPipeError, ConnectionAbortedError)):
        return PeerClosedError(f"Connection reset by peer: {exc}", remote=remote)
    if isinstance(exc, TimeoutError):
        return ConnectionTimeoutError(f"Connection timed out: {exc}", remote=remote)
    return SyncConnectionError(f"{type(exc).__name__}: {exc}", remote=remote)


class WebSocketConnection:
    """:class:`SyncConnection` backed by an upgraded aiohttp WebSocket."""

    def __init__(
        self,
        ws: web.WebSocketResponse,
        *,
        remote: str,
        read_timeout: float | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self._ws = ws
        self._remote = remote
        self._read_timeout = read_timeout
        self._token = token or CancellationToken()
        self._closed = False

    @property
    def remote(self) -> str:
        return self._remote

    @property
    def token(self) -> CancellationToken:
        return self._token

    async def _receive(self) -> aiohttp.WSMessage:
        """Wait for the next frame, the read deadline or cancellation."""
        if self._token.cancelled:
            raise ConnectionCancelledError("Connection cancelled", remote=self._remote)

        receive_task = asyncio.ensure_future(self._ws.receive())
        cancel_task = asyncio.ensure_future(self._token.wait())
        try:
            done, _pending = await asyncio.wait(
                {receive_task, cancel_task},
                timeout=self._read_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (receive_task, cancel_task):
                if not task.done():
                    task.cancel()
            # The socket must not be closed while a receive() is still unwinding.
            await asyncio.gather(receive_task, cancel_task, return_exceptions=True)

        if receive_task in done:
            try:
                return receive_task.result()
            except Exception as exc:
                raise classify_os_error(exc, remote=self._remote) from exc
        if cancel_task in done:
            raise ConnectionCancelledError("Connection cancelled", remote=self._remote)
        raise ConnectionTimeoutError(
            f"No message received within {self._read_timeout}s",
            remote=self._remote,
        )

    async def receive_text(self) -> str:
        """Return the payload of the next data frame.

        Binary frames are accepted and decoded as UTF-8 with replacement.

        Raises
        ------
        PeerClosedError
            The peer sent a close frame or reset the connection.
        ConnectionTimeoutError
            Nothing arrived before the read deadline.
        ConnectionCancelledError
            The cancellation token was set.
        SyncConnectionError
            Any other transport failure.
        """
        while True:
            msg = await self._receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return str(msg.data)
            if msg.type == aiohttp.WSMsgType.BINARY:
                return bytes(msg.data).decode("utf-8", errors="replace")
            if msg.type in _CLOSED_TYPES:
                raise PeerClosedError(
                    f"Peer closed the connection (code={self._ws.close_code})",
                    remote=self._remote,
                )
            if msg.type == aiohttp.WSMsgType.ERROR:
                cause = msg.data if isinstance(msg.data, BaseException) else RuntimeError(str(msg.data))
                raise classify_os_error(cause, remote=self._remote) from cause
            # PING/PONG are answered by aiohttp itself.
            _logger.debug("Ignoring %s frame from %s", msg.type.name, self._remote)

    async def send_text(self, data: str) -> None:
        """Write *data* as a single text frame."""
        if self._ws.closed:
            raise PeerClosedError("Cannot write to a closed connection", remote=self._remote)
        try:
            await self._ws.send_str(data)
        except (OSError, RuntimeError) as exc:
            raise classify_os_error(exc, remote=self._remote) from exc

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._ws.close()
        except (OSError, RuntimeError) as exc:
            _logger.debug("Error closing connection to %s: %s", self._remote, exc)
