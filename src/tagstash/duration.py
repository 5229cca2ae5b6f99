"""Duration parsing utilities."""

import re
from datetime import timedelta

from tagstash.types import Duration

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}


def parse_duration(duration: Duration) -> int:
    """Parse a duration to milliseconds.

    Accepts ``"500ms"``, ``"30s"``, ``"10m"``, ``"2h"``, ``"1d"``, integer
    milliseconds (passed through) and ``timedelta``. Negative durations are
    rejected.
    """
    if isinstance(duration, timedelta):
        # Floor division stays exact; sub-millisecond negatives floor to -1
        millis = duration // timedelta(milliseconds=1)
    elif isinstance(duration, bool):
        raise ValueError(f"Invalid duration: {duration!r}")
    elif isinstance(duration, int):
        millis = duration
    else:
        match = _DURATION_PATTERN.match(duration)
        if not match:
            raise ValueError(f"Invalid duration: {duration!r}")
        value, unit = match.groups()
        millis = int(value) * _UNITS[unit]

    if millis < 0:
        raise ValueError(f"Duration must not be negative: {duration!r}")
    return millis


def format_duration(duration: Duration) -> str:
    """Format a duration in the largest unit that divides it exactly.

    Equivalent inputs format identically: ``"7d"``, ``"168h"`` and
    ``timedelta(days=7)`` all give ``"7d"``.
    """
    millis = parse_duration(duration)
    if millis == 0:
        return "0ms"
    for unit in ("d", "h", "m", "s"):
        size = _UNITS[unit]
        if millis % size == 0:
            return f"{millis // size}{unit}"
    return f"{millis}ms"
