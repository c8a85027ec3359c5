from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from uuid import UUID

from booking_engine.domain.entities.booking import Booking, BookingStatus
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.state_machine import StatusChange


class BookingStorePort(ABC):
    @abstractmethod
    def find_active_bookings(self, provider_id: str, window: Interval | None = None) -> list[Booking]:
        """
        Active (pending, confirmed, in progress) bookings of a provider.
        When a window is given, only bookings overlapping it are returned.
        """
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: UUID) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def create_booking(self, booking: Booking) -> Booking:
        """
        Persist a booking atomically.
        Raises SlotUnavailable if an active booking of the same provider overlaps it.
        """
        raise NotImplementedError

    @abstractmethod
    def create_booking_batch(self, bookings: Sequence[Booking]) -> list[Booking]:
        """
        Persist all bookings or none of them.
        Raises SlotUnavailable naming the first booking that would break non-overlap.
        """
        raise NotImplementedError

    @abstractmethod
    def update_booking_status(
        self,
        booking_id: UUID,
        change: StatusChange,
        expected_status: BookingStatus,
    ) -> Booking:
        """
        Compare-and-set the lifecycle fields of a booking.
        Raises BookingNotFound, or IllegalTransition if the stored status is no longer expected_status.
        """
        raise NotImplementedError

    @abstractmethod
    def update_booking_interval(
        self,
        booking_id: UUID,
        interval: Interval,
        expected_status: BookingStatus,
    ) -> Booking:
        """
        Move a booking to a new interval, re-checking non-overlap against the provider's other bookings.
        """
        raise NotImplementedError

    @abstractmethod
    def find_series(self, parent_booking_id: UUID) -> list[Booking]:
        """Series root plus its generated occurrences, ordered by start time."""
        raise NotImplementedError
