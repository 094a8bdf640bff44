from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from pysmarthome._context import HubContext
from pysmarthome._crypto.xor import XorObfuscator
from pysmarthome.config import HubConfig
from pysmarthome.exceptions import (
    ConnectionCancelledError,
    ConnectionTimeoutError,
    PeerClosedError,
    StoreError,
    SyncConnectionError,
)
from pysmarthome.models.device import DeviceStateSnapshot
from pysmarthome.sync.loop import SyncLoop, SyncState
from pysmarthome.sync.upgrader import serve_connection

_KEY = "test-key"


@dataclass
class FakeConnection:
    incoming: list[str | BaseException]
    events: list[str] = field(default_factory=list)
    sent: list[str] = field(default_factory=list)
    send_error: BaseException | None = None
    close_calls: int = 0
    remote: str = "10.0.0.5"

    async def receive_text(self) -> str:
        self.events.append("read")
        if not self.incoming:
            raise PeerClosedError("eof", remote=self.remote)
        item = self.incoming.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def send_text(self, data: str) -> None:
        self.events.append("write")
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    async def close(self) -> None:
        self.close_calls += 1


@dataclass
class FakeStore:
    """Returns queued snapshots in order and records every fetch."""

    snapshots: list[dict[str, bool]]
    events: list[str]
    fail: bool = False
    fetches: int = 0

    async def get_states(self) -> DeviceStateSnapshot:
        self.fetches += 1
        self.events.append("fetch")
        if self.fail:
            raise StoreError("database is down", operation="get_states")
        states = self.snapshots[0] if len(self.snapshots) == 1 else self.snapshots.pop(0)
        return DeviceStateSnapshot(states=states)


def _loop(connection: FakeConnection, store: FakeStore) -> SyncLoop:
    return SyncLoop(connection, store, XorObfuscator(_KEY))  # type: ignore[arg-type]


def _decode(payload: str) -> dict[str, bool]:
    return DeviceStateSnapshot.parse(XorObfuscator(_KEY).deobfuscate(payload)).as_dict()


@pytest.mark.asyncio
async def test_one_fetch_and_one_write_per_message() -> None:
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", "OK\n", "OK\n"], events=events)
    store = FakeStore(snapshots=[{"lamp": True}], events=events)
    loop = _loop(connection, store)

    await loop.run()

    assert store.fetches == 3
    assert loop.pushes == 3
    assert events == ["read", "fetch", "write"] * 3 + ["read"]
    assert loop.state is SyncState.CLOSED


@pytest.mark.asyncio
async def test_each_push_reflects_the_current_store_state() -> None:
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", "OK\n"], events=events)
    store = FakeStore(
        snapshots=[{"lamp": True, "fan": False}, {"lamp": False, "fan": False}],
        events=events,
    )

    await _loop(connection, store).run()

    first, second = connection.sent
    assert first != second
    assert _decode(first) == {"lamp": True, "fan": False}
    assert _decode(second) == {"lamp": False, "fan": False}


@pytest.mark.asyncio
async def test_heartbeat_is_not_logged_but_other_messages_are(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="pysmarthome.sync.loop")
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", "button pressed"], events=events)
    store = FakeStore(snapshots=[{"lamp": True}], events=events)

    await _loop(connection, store).run()

    content_logs = [r for r in caplog.records if "Received message from client" in r.getMessage()]
    assert len(content_logs) == 1
    assert "button pressed" in content_logs[0].getMessage()
    assert "10.0.0.5" in content_logs[0].getMessage()
    assert content_logs[0].levelno == logging.INFO
    # The informational message still triggers a push.
    assert len(connection.sent) == 2


@pytest.mark.asyncio
async def test_long_client_message_is_truncated_in_log(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="pysmarthome.sync.loop")
    events: list[str] = []
    connection = FakeConnection(incoming=["x" * 100], events=events)
    store = FakeStore(snapshots=[{}], events=events)
    loop = SyncLoop(connection, store, XorObfuscator(_KEY), log_messages_max=10)  # type: ignore[arg-type]

    await loop.run()

    message = next(r.getMessage() for r in caplog.records if "Received message" in r.getMessage())
    assert "x" * 11 not in message
    assert "<truncated>" in message


@pytest.mark.parametrize(
    ("error", "level", "text"),
    [
        (PeerClosedError("reset", remote="10.0.0.5"), logging.WARNING, "Controller disconnected"),
        (ConnectionTimeoutError("idle", remote="10.0.0.5"), logging.WARNING, "Controller timed out"),
        (SyncConnectionError("broken pipe", remote="10.0.0.5"), logging.ERROR, "Error reading message"),
        (ConnectionCancelledError("shutdown", remote="10.0.0.5"), logging.INFO, "cancelled"),
    ],
)
@pytest.mark.asyncio
async def test_read_failures_terminate_with_distinct_severity(
    caplog: pytest.LogCaptureFixture,
    error: SyncConnectionError,
    level: int,
    text: str,
) -> None:
    caplog.set_level(logging.DEBUG, logger="pysmarthome")
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", error, "OK\n"], events=events)
    store = FakeStore(snapshots=[{"lamp": True}], events=events)
    hub = HubContext(config=HubConfig(), store=store, obfuscator=XorObfuscator(_KEY))  # type: ignore[arg-type]

    loop = await serve_connection(connection, hub)  # type: ignore[arg-type]

    assert events == ["read", "fetch", "write", "read"]
    assert connection.close_calls == 1
    assert loop.state is SyncState.CLOSED
    assert connection.incoming == ["OK\n"]
    matching = [r for r in caplog.records if text in r.getMessage()]
    assert [r.levelno for r in matching] == [level]


@pytest.mark.asyncio
async def test_store_failure_closes_without_writing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pysmarthome.sync.loop")
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", "OK\n"], events=events)
    store = FakeStore(snapshots=[{"lamp": True}], events=events, fail=True)
    loop = _loop(connection, store)

    await loop.run()

    assert events == ["read", "fetch"]
    assert connection.sent == []
    assert loop.pushes == 0
    assert any("database is down" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_write_failure_closes_loop(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pysmarthome.sync.loop")
    events: list[str] = []
    connection = FakeConnection(
        incoming=["OK\n", "OK\n"],
        events=events,
        send_error=PeerClosedError("closing transport", remote="10.0.0.5"),
    )
    store = FakeStore(snapshots=[{"lamp": True}], events=events)
    loop = _loop(connection, store)

    await loop.run()

    assert events == ["read", "fetch", "write"]
    assert loop.pushes == 0
    assert loop.state is SyncState.CLOSED
    assert any("Error writing message" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_connection_released_once_when_loop_raises() -> None:
    events: list[str] = []
    connection = FakeConnection(incoming=["OK\n", RuntimeError("boom")], events=events)
    store = FakeStore(snapshots=[{"lamp": True}], events=events)
    hub = HubContext(config=HubConfig(), store=store, obfuscator=XorObfuscator(_KEY))  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        await serve_connection(connection, hub)  # type: ignore[arg-type]

    assert connection.close_calls == 1
