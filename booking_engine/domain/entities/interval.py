from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from booking_engine.domain.exceptions import InvalidInterval


@dataclass(frozen=True)
class Interval:
    """Half-open time range [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if is_aware(self.start) != is_aware(self.end):
            raise InvalidInterval(self.start, self.end, "Interval mixes naive and timezone-aware times")
        if self.end <= self.start:
            raise InvalidInterval(self.start, self.end)

    @classmethod
    def from_duration(cls, start: datetime, duration_minutes: int) -> Interval:
        return cls(start, start + timedelta(minutes=duration_minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def overlaps(self, other: Interval) -> bool:
        # touching boundaries (self.end == other.start) do not overlap
        return self.start < other.end and other.start < self.end

    def shifted(self, delta: timedelta) -> Interval:
        return Interval(self.start + delta, self.end + delta)

    def isoformat(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"

    def localized(self, tz: tzinfo) -> Interval:
        """Attach tz to a naive interval; aware intervals are returned unchanged."""
        if is_aware(self.start):
            return self
        return Interval(self.start.replace(tzinfo=tz), self.end.replace(tzinfo=tz))


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None
