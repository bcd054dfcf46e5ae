"""Human-readable duration parsing for ``changes:`` matchers and timeouts.

Accepts strings like ``500 ms``, ``2s``, ``12 hours`` or ``1h 30min``. A bare
number is read as seconds.
"""

from __future__ import annotations

import re

from .errors import ConfigError

_TOKEN_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([A-Za-zµ]*)")

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "nsec": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "usec": 1e-6,
    "ms": 1e-3,
    "msec": 1e-3,
    "millis": 1e-3,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
    "d": 86400.0,
    "day": 86400.0,
    "days": 86400.0,
    "w": 604800.0,
    "week": 604800.0,
    "weeks": 604800.0,
    "M": 2630016.0,
    "month": 2630016.0,
    "months": 2630016.0,
    "y": 31557600.0,
    "year": 31557600.0,
    "years": 31557600.0,
}


def parse_duration(value: object) -> float:
    """Return the duration described by ``value`` in seconds.

    Raises ``ConfigError`` for unknown units, negative numbers, or text that
    is not a sequence of ``<number><unit>`` tokens.
    """
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ConfigError(f"invalid duration: {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise ConfigError(f"invalid duration: {value!r}")

    text = value.strip()
    if not text:
        raise ConfigError("invalid duration: empty value")

    total = 0.0
    position = 0
    tokens = 0
    while position < len(text):
        if text[position].isspace():
            position += 1
            continue
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise ConfigError(f"invalid duration: {value!r}")
        number, unit = match.group(1), match.group(2)
        if not unit:
            # Bare numbers are only accepted as the whole value.
            if tokens or match.end() < len(text.rstrip()):
                raise ConfigError(f"missing unit in duration: {value!r}")
            return float(number)
        scale = _UNIT_SECONDS.get(unit)
        if scale is None:
            scale = _UNIT_SECONDS.get(unit.lower()) if unit.lower() != "m" else None
        if scale is None:
            raise ConfigError(f"unknown unit {unit!r} in duration: {value!r}")
        total += float(number) * scale
        tokens += 1
        position = match.end()
    return total


def format_duration(seconds: float) -> str:
    """Format ``seconds`` back into text accepted by :func:`parse_duration`."""
    if seconds >= 1 and float(seconds).is_integer():
        whole = int(seconds)
        for unit, size in (("days", 86400), ("hours", 3600), ("min", 60)):
            if whole % size == 0:
                return f"{whole // size} {unit}"
        return f"{whole}s"
    millis = seconds * 1000
    if float(millis).is_integer():
        return f"{int(millis)}ms"
    return f"{seconds}s"


__all__ = [
    "parse_duration",
    "format_duration",
]
