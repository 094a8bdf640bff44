from __future__ import annotations

import pytest

from pysmarthome._constants import DEFAULT_OBFUSCATION_KEY, DEFAULT_WS_PATH
from pysmarthome.config import HubConfig
from pysmarthome.exceptions import HubConfigError


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("HUB_HOST", "HUB_PORT", "HUB_WS_PATH", "HUB_OBFUSCATION_KEY", "HUB_READ_TIMEOUT", "HUB_DEVICES"):
        monkeypatch.delenv(name, raising=False)

    config = HubConfig.from_env()

    assert config.port == 8080
    assert config.ws_path == DEFAULT_WS_PATH
    assert config.obfuscation_key == DEFAULT_OBFUSCATION_KEY
    assert config.read_timeout is None
    assert config.devices == ()


def test_from_env_reads_hub_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUB_PORT", "9000")
    monkeypatch.setenv("HUB_OBFUSCATION_KEY", "other-key")
    monkeypatch.setenv("HUB_READ_TIMEOUT", "30")
    monkeypatch.setenv("HUB_DEVICES", "lamp, fan,,heater ")

    config = HubConfig.from_env()

    assert config.port == 9000
    assert config.obfuscation_key == "other-key"
    assert config.read_timeout == 30.0
    assert config.devices == ("lamp", "fan", "heater")


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUB_PORT", "9000")
    monkeypatch.setenv("HUB_DEVICES", "lamp")

    config = HubConfig.from_env(port=9100, devices=["fan"])

    assert config.port == 9100
    assert config.devices == ("fan",)


@pytest.mark.parametrize("value", ["0", "off", "none", ""])
def test_read_timeout_can_be_disabled_from_env(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("HUB_READ_TIMEOUT", value)
    assert HubConfig.from_env().read_timeout is None


def test_non_numeric_port_is_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUB_PORT", "eighty")
    with pytest.raises(HubConfigError):
        HubConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"port": 0},
        {"port": 70000},
        {"ws_path": "smart-home"},
        {"obfuscation_key": ""},
        {"obfuscation_key": "clé"},
        {"read_timeout": -1.0},
        {"log_level": "LOUD"},
        {"log_messages_max": 0},
        {"devices": ("lamp", "lamp")},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(HubConfigError):
        HubConfig(**kwargs)  # type: ignore[arg-type]


def test_config_is_frozen() -> None:
    config = HubConfig()
    with pytest.raises(AttributeError):
        config.port = 1  # type: ignore[misc]
