"""
Periodic tick sources driving a session.

A scheduler calls its callback with monotonically increasing timestamps (seconds)
until stopped. The Qt frame timer lives in ``widget.py``; ``ManualScheduler`` is the
headless source used by tests and scripts.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol

TickCallback = Callable[[float], None]


class Scheduler(Protocol):
    @property
    def active(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class ManualScheduler:
    """Fires ticks only when told to, with caller-supplied timestamps."""

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self._firing = False
        self.fired = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def fire(self, timestamp: float) -> bool:
        """Run one tick. Returns False when the scheduler is stopped."""
        if self._callback is None:
            return False
        if self._firing:
            raise RuntimeError("tick already in progress")
        self._firing = True
        try:
            self._callback(timestamp)
        finally:
            self._firing = False
        self.fired += 1
        return True

    def run(self, timestamps: Iterable[float]) -> int:
        count = 0
        for timestamp in timestamps:
            if not self.fire(timestamp):
                break
            count += 1
        return count
