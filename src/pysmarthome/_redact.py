"""Helpers for safe logging.

Controllers may send arbitrary text, and the hub configuration carries the
obfuscation key. Values from either source go through
:func:`redact_for_log` before they are logged: strings are length-capped
and control characters are escaped so a client cannot forge log lines,
and secret-looking fields are replaced.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "authorization",
        "cookie",
    }
)

_SENSITIVE_SUFFIXES: tuple[str, ...] = ("_key", "_secret")


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered in _SENSITIVE_VALUE_KEYS or lowered == "key" or lowered.endswith(_SENSITIVE_SUFFIXES)


def _printable(value: str) -> str:
    """Escape control characters (newlines included)."""
    if value.isprintable():
        return value
    return "".join(ch if ch.isprintable() else ch.encode("unicode_escape").decode("ascii") for ch in value)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{_printable(value[:max_string])}…<truncated>"
        return _printable(value)

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>"
            if _is_sensitive(str(k))
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Set):
        value = sorted(value, key=repr)
    if isinstance(value, (list, tuple)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
