from __future__ import annotations

from typing import Any

import pytest

from pysmarthome import __main__ as cli
from pysmarthome._context import HUB_KEY


def test_main_builds_app_from_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_run_app(app: Any, *, host: str, port: int, print: Any) -> None:  # noqa: A002
        captured["app"] = app
        captured["host"] = host
        captured["port"] = port

    monkeypatch.delenv("HUB_DEVICES", raising=False)
    monkeypatch.setattr(cli.web, "run_app", _fake_run_app)

    cli.main(["--host", "127.0.0.1", "--port", "9090", "--device", "lamp", "--device", "fan", "--read-timeout", "15"])

    hub = captured["app"][HUB_KEY]
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 9090
    assert hub.config.devices == ("lamp", "fan")
    assert hub.config.read_timeout == 15.0


def test_main_rejects_invalid_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli.web, "run_app", lambda *_a, **_k: None)

    with pytest.raises(SystemExit):
        cli.main(["--port", "0"])
