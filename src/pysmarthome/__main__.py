"""Command-line entry point: ``python -m pysmarthome``."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from collections.abc import Sequence
from typing import Any

from aiohttp import web

from pysmarthome._redact import redact_for_log
from pysmarthome.app import build_app
from pysmarthome.config import HubConfig
from pysmarthome.exceptions import HubConfigError
from pysmarthome.state.store import MemoryDeviceStore

_logger = logging.getLogger("pysmarthome")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pysmarthome", description="Smart-home hub server")
    parser.add_argument("--host", help="Interface to bind (env: HUB_HOST)")
    parser.add_argument("--port", type=int, help="Port to listen on (env: HUB_PORT)")
    parser.add_argument(
        "--device",
        action="append",
        dest="devices",
        help="Register a device; repeat for several (env: HUB_DEVICES, comma separated)",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        help="Drop controller connections silent for this many seconds (env: HUB_READ_TIMEOUT)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.devices:
        overrides["devices"] = tuple(args.devices)
    if args.read_timeout is not None:
        overrides["read_timeout"] = args.read_timeout if args.read_timeout > 0 else None

    try:
        config = HubConfig.from_env(**overrides)
    except HubConfigError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _logger.info("Starting hub config=%s", redact_for_log(dataclasses.asdict(config)))

    store = MemoryDeviceStore(config.devices)
    web.run_app(build_app(config, store), host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
