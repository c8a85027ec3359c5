from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta, tzinfo

from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.application.use_cases.conflicts import find_conflicts
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.entities.working_hours import WorkingHours
from booking_engine.domain.exceptions import InvalidInterval

SLOT_STEP = timedelta(minutes=30)


class SlotSequence:
    """
    Open candidate slots for one provider and day.

    Lazy and restartable: every iteration re-reads the provider's active
    bookings for the window once, then walks the day in fixed 30-minute steps.
    """

    def __init__(
        self,
        store: BookingStorePort,
        provider_id: str,
        window: Interval,
        duration: timedelta,
    ) -> None:
        self._store = store
        self.provider_id = provider_id
        self.window = window
        self.duration = duration

    def __iter__(self) -> Iterator[Interval]:
        booked = self._store.find_active_bookings(self.provider_id, self.window)
        cursor = self.window.start
        while cursor + self.duration <= self.window.end:
            candidate = Interval(cursor, cursor + self.duration)
            if not find_conflicts(candidate, booked):
                yield candidate
            cursor += SLOT_STEP


class SlotGenerator:
    def __init__(
        self,
        store: BookingStorePort,
        timezone: tzinfo | None = None,
        default_working_hours: WorkingHours | None = None,
    ) -> None:
        self._store = store
        self._timezone = timezone
        self._default_working_hours = default_working_hours or WorkingHours()

    def generate_slots(
        self,
        provider_id: str,
        day: date,
        duration_minutes: int,
        working_hours: WorkingHours | None = None,
    ) -> SlotSequence:
        if duration_minutes <= 0:
            raise InvalidInterval(0, duration_minutes, "Slot duration must be positive")
        hours = working_hours or self._default_working_hours
        return SlotSequence(
            store=self._store,
            provider_id=provider_id,
            window=hours.window(day, self._timezone),
            duration=timedelta(minutes=duration_minutes),
        )
