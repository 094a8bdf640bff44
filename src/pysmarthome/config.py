"""Hub configuration for pysmarthome."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from pysmarthome._constants import DEFAULT_OBFUSCATION_KEY, DEFAULT_WS_PATH
from pysmarthome.exceptions import HubConfigError


def _env_float_or_none(value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "off", "0"}:
        return None
    return float(normalized)


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclasses.dataclass(frozen=True)
class HubConfig:
    """Server configuration.

    Parameters
    ----------
    host : str
        Interface the HTTP server binds to.
    port : int
        TCP port the HTTP server listens on.
    ws_path : str
        Path of the controller upgrade endpoint.
    obfuscation_key : str
        ASCII key for the XOR transform applied to pushed snapshots.
        Fixed for the lifetime of the process.
    read_timeout : float or None
        Seconds a synchronization connection may stay silent before it is
        dropped. ``None`` waits forever.
    devices : tuple of str
        Device identifiers registered in the store at startup.
    log_level : str
        Root logging level name used by the command-line entry point.
    log_messages_max : int
        Client messages longer than this are truncated in logs.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    ws_path: str = DEFAULT_WS_PATH
    obfuscation_key: str = DEFAULT_OBFUSCATION_KEY
    read_timeout: float | None = None
    devices: tuple[str, ...] = ()
    log_level: str = "INFO"
    log_messages_max: int = 512

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise HubConfigError(f"port must be between 1 and 65535, got {self.port}")
        if not self.ws_path.startswith("/"):
            raise HubConfigError(f"ws_path must start with '/', got {self.ws_path!r}")
        if not self.obfuscation_key:
            raise HubConfigError("obfuscation_key must be non-empty")
        if not self.obfuscation_key.isascii():
            raise HubConfigError("obfuscation_key must be ASCII")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise HubConfigError(f"read_timeout must be positive or None, got {self.read_timeout}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise HubConfigError(f"unknown log level {self.log_level!r}")
        if self.log_messages_max < 1:
            raise HubConfigError("log_messages_max must be at least 1")
        if len(set(self.devices)) != len(self.devices):
            raise HubConfigError("devices must be unique")

    @classmethod
    def from_env(cls, **overrides: Any) -> HubConfig:
        """Create configuration from ``HUB_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        HubConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "HUB_HOST": "host",
            "HUB_WS_PATH": "ws_path",
            "HUB_OBFUSCATION_KEY": "obfuscation_key",
            "HUB_LOG_LEVEL": "log_level",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            port_env = env.get("HUB_PORT")
            if port_env is not None and "port" not in overrides:
                config_kwargs["port"] = int(port_env)

            timeout_env = env.get("HUB_READ_TIMEOUT")
            if timeout_env is not None and "read_timeout" not in overrides:
                config_kwargs["read_timeout"] = _env_float_or_none(timeout_env)

            max_env = env.get("HUB_LOG_MESSAGES_MAX")
            if max_env is not None and "log_messages_max" not in overrides:
                config_kwargs["log_messages_max"] = int(max_env)
        except ValueError as exc:
            raise HubConfigError(f"Invalid numeric environment value: {exc}") from exc

        devices_env = env.get("HUB_DEVICES")
        if devices_env is not None and "devices" not in overrides:
            config_kwargs["devices"] = _env_list(devices_env)

        config_kwargs.update(overrides)
        if isinstance(config_kwargs.get("devices"), list):
            config_kwargs["devices"] = tuple(config_kwargs["devices"])

        return cls(**config_kwargs)
