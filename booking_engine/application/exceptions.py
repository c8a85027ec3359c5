from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from booking_engine.domain.exceptions import IllegalTransition, InvalidInterval, SchedulingError

if TYPE_CHECKING:
    from booking_engine.domain.entities.booking import Booking, BookingStatus
    from booking_engine.domain.entities.interval import Interval

__all__ = [
    "BookingNotFound",
    "BookingNotReschedulable",
    "IllegalTransition",
    "InvalidInterval",
    "SchedulingError",
    "SeriesGenerationFailed",
    "SlotUnavailable",
]


class SlotUnavailable(SchedulingError):
    """Raised when a requested interval collides with an active booking of the provider."""

    def __init__(self, provider_id: str, interval: Interval, conflicting: Sequence[Booking] = ()) -> None:
        self.provider_id = provider_id
        self.interval = interval
        self.conflicting = list(conflicting)
        super().__init__(f"Provider {provider_id} is not available for {interval.isoformat()}")


class BookingNotFound(SchedulingError):
    """Raised when a referenced booking or series does not exist."""

    def __init__(self, booking_id: UUID) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class BookingNotReschedulable(SchedulingError):
    """Raised when rescheduling a booking that is no longer pending or confirmed."""

    def __init__(self, booking_id: UUID, status: BookingStatus) -> None:
        self.booking_id = booking_id
        self.status = status
        super().__init__(f"Booking {booking_id} cannot be rescheduled while {status.value}")


class SeriesGenerationFailed(SchedulingError):
    """Raised when one occurrence of a recurring request collides; nothing from the batch is kept."""

    def __init__(self, failed_index: int, conflicting_booking: Booking | None) -> None:
        self.failed_index = failed_index
        self.conflicting_booking = conflicting_booking
        conflict_id = conflicting_booking.id if conflicting_booking else None
        super().__init__(f"Occurrence {failed_index} of the series conflicts with booking {conflict_id}")
