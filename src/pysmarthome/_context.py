"""Per-application state shared by request handlers."""

from __future__ import annotations

from dataclasses import dataclass, field

from aiohttp import web

from pysmarthome._crypto import PayloadObfuscator
from pysmarthome.config import HubConfig
from pysmarthome.state.store import DeviceStore
from pysmarthome.sync.connection import CancellationToken


@dataclass
class HubContext:
    """Collaborators injected into every handler through :data:`HUB_KEY`."""

    config: HubConfig
    store: DeviceStore
    obfuscator: PayloadObfuscator
    tokens: set[CancellationToken] = field(default_factory=set)

    def cancel_all(self) -> int:
        """Set the token of every live sync connection; return how many."""
        tokens = list(self.tokens)
        for token in tokens:
            token.cancel()
        return len(tokens)


HUB_KEY: web.AppKey[HubContext] = web.AppKey("hub", HubContext)
