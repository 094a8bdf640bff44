"""Payload obfuscation for controller pushes."""

from __future__ import annotations

from typing import Protocol

from pysmarthome._crypto.xor import XorObfuscator, xor_text


class PayloadObfuscator(Protocol):
    """Protocol for the symmetric transform applied to outgoing snapshots."""

    def obfuscate(self, plaintext: str) -> str: ...

    def deobfuscate(self, payload: str) -> str: ...


__all__ = [
    "PayloadObfuscator",
    "XorObfuscator",
    "xor_text",
]
