"""Time-of-day confidence multipliers.

Ranges are "start-end" local hours, end exclusive. A range whose start is
greater than its end (e.g. "23-04") wraps past midnight.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Mapping

import pytz

from signal_core.models import parse_hour_range

Clock = Callable[[], datetime]


def local_clock(timezone: str) -> Clock:
    """Clock returning the current time in ``timezone``."""
    tz = pytz.timezone(timezone)

    def _now() -> datetime:
        return datetime.now(tz)

    return _now


def hour_in_range(hour: int, start: int, end: int) -> bool:
    """True if ``hour`` falls in [start, end), wrapping when start > end."""
    if start <= end:
        return start <= hour < end
    return hour >= start or hour < end


class TimeOfDayTable:
    """Ordered hour-range lookup; the first matching range wins."""

    def __init__(self, multipliers: Mapping[str, float], default: float = 1.0):
        self.default = default
        self._ranges: tuple[tuple[int, int, float], ...] = tuple(
            (*parse_hour_range(key), float(value)) for key, value in multipliers.items()
        )

    def multiplier(self, hour: int) -> float:
        for start, end, value in self._ranges:
            if hour_in_range(hour, start, end):
                return value
        return self.default
