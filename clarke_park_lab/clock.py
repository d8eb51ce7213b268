"""
Simulation clock: advances the phase angle from wall-clock timestamps.
"""

from __future__ import annotations

import math
from typing import Optional

from .transforms import TWO_PI


def wrap_angle(angle: float) -> float:
    """Reduce an angle into [0, 2π), also for negative input."""
    wrapped = angle % TWO_PI
    # tiny negative inputs round up to exactly 2π
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


class SimulationClock:
    """Turns successive timestamps (seconds) into angle increments of speed·2π·dt."""

    def __init__(self) -> None:
        self._last: Optional[float] = None

    def rebase(self) -> None:
        self._last = None

    def advance(self, timestamp: float, angle: float, speed: float, playing: bool) -> float:
        previous = self._last
        self._last = timestamp
        if previous is None or not playing:
            return angle
        dt = max(timestamp - previous, 0.0)
        turns = speed * dt
        if not math.isfinite(turns):
            # at this magnitude only the fractional part of speed moves the angle
            turns = math.fmod(speed, 1.0) * dt
            if not math.isfinite(turns):
                return angle
        return wrap_angle(angle + TWO_PI * (turns % 1.0))
