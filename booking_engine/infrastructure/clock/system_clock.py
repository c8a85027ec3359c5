from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from booking_engine.application.ports.clock import ClockPort


class SystemClock(ClockPort):
    def __init__(self, timezone: tzinfo | None = None) -> None:
        self._timezone = timezone or ZoneInfo("UTC")

    def now(self) -> datetime:
        return datetime.now(self._timezone)
