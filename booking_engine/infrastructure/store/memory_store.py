from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from booking_engine.application.exceptions import (
    BookingNotFound,
    BookingNotReschedulable,
    IllegalTransition,
    SlotUnavailable,
)
from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.application.use_cases.conflicts import find_conflicts
from booking_engine.domain.entities.booking import Booking, BookingStatus
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.state_machine import StatusChange


class MemoryBookingStore(BookingStorePort):
    """
    In-process booking store.

    Every write re-checks provider non-overlap under one lock, so two racing
    requests for colliding intervals cannot both be stored.
    """

    def __init__(self, bookings: Sequence[Booking] | None = None) -> None:
        self._bookings: dict[UUID, Booking] = {b.id: b for b in bookings or ()}
        self._lock = threading.Lock()

    def find_active_bookings(self, provider_id: str, window: Interval | None = None) -> list[Booking]:
        with self._lock:
            return self._active_for(provider_id, window)

    def get_booking(self, booking_id: UUID) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def create_booking(self, booking: Booking) -> Booking:
        return self.create_booking_batch([booking])[0]

    def create_booking_batch(self, bookings: Sequence[Booking]) -> list[Booking]:
        with self._lock:
            accepted: list[Booking] = []
            for booking in bookings:
                if booking.id in self._bookings:
                    raise ValueError(f"Booking {booking.id} already exists")
                if booking.is_active:
                    conflicts = find_conflicts(
                        booking.interval,
                        self._active_for(booking.provider_id, booking.interval) + accepted,
                    )
                    conflicts = [c for c in conflicts if c.provider_id == booking.provider_id]
                    if conflicts:
                        raise SlotUnavailable(booking.provider_id, booking.interval, conflicts)
                accepted.append(booking)
            for booking in accepted:
                self._bookings[booking.id] = booking
            self._commit()
            return list(accepted)

    def update_booking_status(
        self,
        booking_id: UUID,
        change: StatusChange,
        expected_status: BookingStatus,
    ) -> Booking:
        with self._lock:
            current = self._require(booking_id)
            if current.status != expected_status:
                raise IllegalTransition(current.status, change.status)
            updated = change.apply(current)
            self._bookings[booking_id] = updated
            self._commit()
            return updated

    def update_booking_interval(
        self,
        booking_id: UUID,
        interval: Interval,
        expected_status: BookingStatus,
    ) -> Booking:
        with self._lock:
            current = self._require(booking_id)
            if current.status != expected_status:
                raise BookingNotReschedulable(booking_id, current.status)
            conflicts = find_conflicts(
                interval,
                self._active_for(current.provider_id, interval),
                exclude_booking_id=booking_id,
            )
            if conflicts:
                raise SlotUnavailable(current.provider_id, interval, conflicts)
            updated = replace(
                current,
                start_time=interval.start,
                end_time=interval.end,
                duration_minutes=interval.duration_minutes,
            )
            self._bookings[booking_id] = updated
            self._commit()
            return updated

    def find_series(self, parent_booking_id: UUID) -> list[Booking]:
        with self._lock:
            series = [
                b
                for b in self._bookings.values()
                if b.id == parent_booking_id or b.parent_booking_id == parent_booking_id
            ]
        return sorted(series, key=lambda b: b.start_time)

    def all_bookings(self) -> list[Booking]:
        with self._lock:
            return sorted(self._bookings.values(), key=lambda b: b.start_time)

    def _active_for(self, provider_id: str, window: Interval | None) -> list[Booking]:
        return sorted(
            (
                b
                for b in self._bookings.values()
                if b.provider_id == provider_id
                and b.is_active
                and (window is None or b.overlaps(window))
            ),
            key=lambda b: b.start_time,
        )

    def _require(self, booking_id: UUID) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def _commit(self) -> None:
        """Hook called under the lock after every successful write."""
        pass
