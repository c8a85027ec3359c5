from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.entities.interval import Interval


def find_conflicts(
    interval: Interval,
    bookings: Iterable[Booking],
    exclude_booking_id: UUID | None = None,
) -> list[Booking]:
    """Return the active bookings whose interval overlaps the candidate.

    Terminal bookings never conflict; boundary touches are not overlaps.
    """
    return [
        booking
        for booking in bookings
        if booking.is_active and booking.id != exclude_booking_id and booking.overlaps(interval)
    ]


class ConflictDetector:
    def __init__(self, store: BookingStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def find_conflicts(
        self,
        provider_id: str,
        interval: Interval,
        exclude_booking_id: UUID | None = None,
    ) -> list[Booking]:
        active = self._store.find_active_bookings(provider_id, interval)
        return find_conflicts(interval, active, exclude_booking_id)

    def has_conflict(
        self,
        provider_id: str,
        interval: Interval,
        exclude_booking_id: UUID | None = None,
    ) -> bool:
        conflicts = self.find_conflicts(provider_id, interval, exclude_booking_id)
        if conflicts:
            self._logger.debug(
                "Interval conflicts with existing bookings",
                extra={"provider_id": provider_id, "count": len(conflicts)},
            )
        return bool(conflicts)

    def check_availability(self, provider_id: str, interval: Interval) -> bool:
        return not self.has_conflict(provider_id, interval)
