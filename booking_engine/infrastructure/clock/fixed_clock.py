from __future__ import annotations

from datetime import datetime

from booking_engine.application.ports.clock import ClockPort


class FixedClock(ClockPort):
    """Clock frozen at a given instant until set() moves it."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current
