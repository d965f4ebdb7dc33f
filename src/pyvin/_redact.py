"""Helpers for safe debug logging.

Decoder requests carry credentials in plain headers.  This module
provides a small utility to redact them before emitting DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "username",
        "password",
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "token",
    }
)


def redact_for_log(
    value: Any,
    *,
    extra_keys: Iterable[str] = (),
    max_string: int = 512,
    _depth: int = 0,
) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    Keys are matched case-insensitively against the built-in sensitive
    set plus *extra_keys* (e.g. configured credential header names).
    """
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    sensitive = _SENSITIVE_VALUE_KEYS | {key.lower() for key in extra_keys}

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in sensitive:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(
                    v,
                    extra_keys=sensitive,
                    max_string=max_string,
                    _depth=_depth + 1,
                )
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, extra_keys=sensitive, max_string=max_string, _depth=_depth + 1) for v in value]

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
