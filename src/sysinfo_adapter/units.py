"""Adaptive time units for human-friendly display of growing durations.

Units form a chain ``s -> m -> h -> d``.  :func:`pick_unit` walks up the
chain while the value is at or above the current unit's rollover
threshold; :func:`convert` divides by the chosen unit's length.  Both
functions expect a non-negative number of seconds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

TimeUnit = Literal["s", "m", "h", "d"]

DEFAULT_UNIT: TimeUnit = "s"


@dataclass(frozen=True)
class UnitInfo:
    """Rollover threshold, successor and length of one time unit."""

    threshold: float
    next: TimeUnit
    seconds: int


UNITS: dict[str, UnitInfo] = {
    "s": UnitInfo(threshold=60, next="m", seconds=1),
    "m": UnitInfo(threshold=60 * 60, next="h", seconds=60),
    "h": UnitInfo(threshold=60 * 60 * 24, next="d", seconds=60 * 60),
    # days never roll over
    "d": UnitInfo(threshold=math.inf, next="d", seconds=60 * 60 * 24),
}


def pick_unit(seconds: float) -> TimeUnit:
    """Return the coarsest unit whose predecessor's threshold *seconds* reached.

    ``pick_unit(59) == "s"``, ``pick_unit(60) == "m"``,
    ``pick_unit(86400) == "d"``.
    """
    unit = DEFAULT_UNIT
    info = UNITS[unit]
    while seconds >= info.threshold and info.next != unit:
        unit = info.next
        info = UNITS[unit]
    return unit


def convert(seconds: float, unit: TimeUnit) -> float:
    """Express *seconds* in *unit*."""
    return seconds / UNITS[unit].seconds
