from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from booking_engine.domain.entities.interval import Interval

_DAY = timedelta(hours=24)


@dataclass(frozen=True)
class WorkingHours:
    """Daily window as offsets from midnight; ``end`` may be 24:00."""

    start: timedelta = timedelta(hours=9)
    end: timedelta = _DAY

    def __post_init__(self) -> None:
        if self.start < timedelta(0) or self.end > _DAY:
            raise ValueError("Working hours must fall within a single day")
        if self.end <= self.start:
            raise ValueError("Working hours must end after they start")

    @classmethod
    def parse(cls, start: str, end: str) -> WorkingHours:
        """Build from "HH:MM" strings, accepting "24:00" as end of day."""
        return cls(start=_parse_clock(start), end=_parse_clock(end))

    def window(self, day: date, tz: tzinfo | None = None) -> Interval:
        midnight = datetime.combine(day, time.min, tzinfo=tz)
        return Interval(midnight + self.start, midnight + self.end)


def _parse_clock(value: str) -> timedelta:
    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except ValueError as e:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM") from e
    if not 0 <= minutes < 60 or not 0 <= hours <= 24 or (hours == 24 and minutes):
        raise ValueError(f"Invalid clock time {value!r}")
    return timedelta(hours=hours, minutes=minutes)
