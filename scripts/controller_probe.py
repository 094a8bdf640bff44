#!/usr/bin/env python3
"""Controller probe for the hub sync channel.

Connects to the upgrade endpoint the way a controller does:
1) sends the ``OK\\n`` heartbeat (or a custom message),
2) waits for the pushed payload,
3) deobfuscates it with the shared key and prints the device map.

Use this to check a running hub and the obfuscation key without flashing
a controller.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import aiohttp

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pysmarthome._constants import DEFAULT_OBFUSCATION_KEY, DEFAULT_WS_PATH, HEARTBEAT  # noqa: E402
from pysmarthome._crypto.xor import XorObfuscator  # noqa: E402
from pysmarthome.exceptions import SerializationError  # noqa: E402
from pysmarthome.models.device import DeviceStateSnapshot  # noqa: E402

_LOG = logging.getLogger("controller_probe")


@dataclass
class ProbeStats:
    started_at: float
    pushes: int = 0
    decode_failed: int = 0
    changes: int = 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll the hub sync channel like a controller.")
    parser.add_argument("--url", default=f"http://127.0.0.1:8080{DEFAULT_WS_PATH}", help="Upgrade endpoint URL.")
    parser.add_argument("--key", default=DEFAULT_OBFUSCATION_KEY, help="Obfuscation key shared with the hub.")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between heartbeats.")
    parser.add_argument("--count", type=int, default=0, help="Number of polls (0 = run until Ctrl+C).")
    parser.add_argument("--message", default=HEARTBEAT, help="Message to send instead of the heartbeat.")
    parser.add_argument("--raw", action="store_true", help="Also print the obfuscated payload.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


async def _probe(args: argparse.Namespace) -> ProbeStats:
    obfuscator = XorObfuscator(args.key)
    stats = ProbeStats(started_at=time.monotonic())
    previous: DeviceStateSnapshot | None = None

    async with aiohttp.ClientSession() as session, session.ws_connect(args.url) as ws:
        _LOG.info("Connected to %s", args.url)
        while args.count <= 0 or stats.pushes < args.count:
            await ws.send_str(args.message)
            msg = await ws.receive()
            if msg.type != aiohttp.WSMsgType.TEXT:
                _LOG.warning("Hub closed the connection (%s)", msg.type.name)
                break

            stats.pushes += 1
            if args.raw:
                print(f"raw: {msg.data!r}")
            try:
                snapshot = DeviceStateSnapshot.parse(obfuscator.deobfuscate(msg.data))
            except SerializationError as exc:
                stats.decode_failed += 1
                print(f"[{stats.pushes}] could not decode payload (wrong key?): {exc}")
            else:
                if previous is not None and snapshot != previous:
                    stats.changes += 1
                previous = snapshot
                print(f"[{stats.pushes}] {json.dumps(snapshot.as_dict(), sort_keys=True)}")

            await asyncio.sleep(args.interval)
    return stats


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        stats = asyncio.run(_probe(args))
    except KeyboardInterrupt:
        return
    except aiohttp.ClientError as exc:
        raise SystemExit(f"Connection failed: {exc}") from exc

    elapsed = time.monotonic() - stats.started_at
    print(f"pushes={stats.pushes} changes={stats.changes} decode_failed={stats.decode_failed} elapsed={elapsed:.1f}s")


if __name__ == "__main__":
    main()
