"""Repeating-key XOR obfuscation of text payloads.

This is *not* encryption. It only keeps the device map from crossing the
wire as readable JSON. The controller applies the same transform with the
same key to recover the plaintext.

Both the key and the payload are ASCII (snapshots are serialized with
``ensure_ascii``), so every XORed code point stays below 128 and the
result is a valid text frame of exactly the same length.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pysmarthome.exceptions import HubConfigError


def xor_text(value: str, key: str) -> str:
    """XOR each character of *value* with the repeating *key*.

    Applying the function twice with the same key returns *value*.

    Parameters
    ----------
    value : str
        Text to transform.
    key : str
        Non-empty key.

    Returns
    -------
    str
        Transformed text with ``len(value)`` characters.
    """
    key_len = len(key)
    return "".join(chr(ord(ch) ^ ord(key[i % key_len])) for i, ch in enumerate(value))


@dataclass(frozen=True)
class XorObfuscator:
    """Immutable obfuscator bound to a process-wide key."""

    key: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.key:
            raise HubConfigError("Obfuscation key is empty")
        if not self.key.isascii():
            raise HubConfigError("Obfuscation key must be ASCII")

    def obfuscate(self, plaintext: str) -> str:
        return xor_text(plaintext, self.key)

    def deobfuscate(self, payload: str) -> str:
        return xor_text(payload, self.key)
