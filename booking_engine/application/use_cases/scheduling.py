from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timezone as dt_timezone, tzinfo
from uuid import UUID

from booking_engine.application.dto.availability import Availability
from booking_engine.application.dto.booking_request import BookingRequest
from booking_engine.application.exceptions import BookingNotFound, BookingNotReschedulable, SlotUnavailable
from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.application.ports.clock import ClockPort
from booking_engine.application.use_cases.conflicts import ConflictDetector
from booking_engine.application.use_cases.recurrence import RecurrenceExpander
from booking_engine.application.use_cases.slots import SlotGenerator
from booking_engine.domain import state_machine
from booking_engine.domain.entities.booking import Booking, BookingStatus, RecurrencePattern
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.entities.working_hours import WorkingHours
from booking_engine.domain.state_machine import StatusChange

RESCHEDULABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class SchedulingService:
    """Entry point for booking, lifecycle changes, series and availability queries."""

    def __init__(
        self,
        store: BookingStorePort,
        clock: ClockPort,
        timezone: tzinfo | None = None,
        working_hours: WorkingHours | None = None,
        max_series_occurrences: int = 52,
    ) -> None:
        self._store = store
        self._clock = clock
        # naive request times are read in this zone
        self._timezone = timezone or dt_timezone.utc
        self._detector = ConflictDetector(store)
        self._slots = SlotGenerator(store, timezone=self._timezone, default_working_hours=working_hours)
        self._recurrence = RecurrenceExpander(store, self._detector, clock)
        self._max_series_occurrences = max_series_occurrences
        self._logger = logging.getLogger(__name__)

    def book(self, request: BookingRequest) -> Booking:
        request = self._localize_request(request)
        booking = self._new_booking(request)
        self._ensure_available(request.provider_id, request.interval)
        created = self._store.create_booking(booking)
        self._logger.info(
            "Booking created",
            extra={"booking_id": str(created.id), "provider_id": created.provider_id},
        )
        return created

    def book_recurring(
        self,
        request: BookingRequest,
        pattern: RecurrencePattern,
        occurrence_count: int,
    ) -> list[Booking]:
        """
        Book a series root plus occurrence_count repetitions.

        The root and its occurrences are written in one batch: if any of them
        collides, nothing is persisted, root included.
        """
        if occurrence_count > self._max_series_occurrences:
            raise ValueError(f"occurrence_count must not exceed {self._max_series_occurrences}")
        request = self._localize_request(request)
        parent = self._new_booking(request, pattern=pattern)
        self._ensure_available(request.provider_id, request.interval)
        return self._recurrence.expand(parent, occurrence_count, pattern, include_parent=True)

    def transition(
        self,
        booking_id: UUID,
        target_status: BookingStatus,
        actor: str,
        reason: str | None = None,
    ) -> Booking:
        booking = self.get_booking(booking_id)
        now = self._clock.now()
        updated = state_machine.apply_transition(booking, target_status, actor, reason, now)
        if updated is booking:
            # idempotent confirm
            return booking
        stored = self._store.update_booking_status(
            booking_id,
            StatusChange.from_booking(updated, updated_at=now),
            expected_status=booking.status,
        )
        self._logger.info(
            "Booking transitioned",
            extra={"booking_id": str(booking_id), "status": booking.status.value, "target": target_status.value},
        )
        return stored

    def reschedule(self, booking_id: UUID, interval: Interval) -> Booking:
        interval = interval.localized(self._timezone)
        booking = self.get_booking(booking_id)
        if booking.status not in RESCHEDULABLE_STATUSES:
            raise BookingNotReschedulable(booking_id, booking.status)
        conflicts = self._detector.find_conflicts(booking.provider_id, interval, exclude_booking_id=booking_id)
        if conflicts:
            raise SlotUnavailable(booking.provider_id, interval, conflicts)
        stored = self._store.update_booking_interval(booking_id, interval, expected_status=booking.status)
        self._logger.info(
            "Booking rescheduled",
            extra={"booking_id": str(booking_id), "provider_id": booking.provider_id},
        )
        return stored

    def cancel_series(self, parent_booking_id: UUID, reason: str | None = None) -> int:
        return self._recurrence.cancel_series(parent_booking_id, reason)

    def check_availability(self, provider_id: str, interval: Interval) -> Availability:
        interval = interval.localized(self._timezone)
        conflicts = self._detector.find_conflicts(provider_id, interval)
        return Availability(provider_id=provider_id, interval=interval, conflicts=tuple(conflicts))

    def provider_schedule(self, provider_id: str, window: Interval) -> list[Booking]:
        """Active bookings of a provider overlapping window, by start."""
        return self._store.find_active_bookings(provider_id, window.localized(self._timezone))

    def available_slots(
        self,
        provider_id: str,
        day: date,
        duration_minutes: int,
        working_hours: WorkingHours | None = None,
    ) -> list[Interval]:
        return list(self._slots.generate_slots(provider_id, day, duration_minutes, working_hours))

    def get_booking(self, booking_id: UUID) -> Booking:
        booking = self._store.get_booking(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def get_series(self, parent_booking_id: UUID) -> list[Booking]:
        return self._recurrence.series(parent_booking_id)

    def _localize_request(self, request: BookingRequest) -> BookingRequest:
        return replace(request, interval=request.interval.localized(self._timezone))

    def _new_booking(self, request: BookingRequest, pattern: RecurrencePattern | None = None) -> Booking:
        request.validate_pricing()
        now = self._clock.now()
        return Booking(
            tenant_id=request.tenant_id,
            provider_id=request.provider_id,
            customer_id=request.customer_id,
            service_id=request.service_id,
            start_time=request.interval.start,
            end_time=request.interval.end,
            is_recurring=pattern is not None,
            recurrence_pattern=pattern,
            base_price=request.base_price,
            addons_price=request.addons_price,
            total_price=request.total_price,
            deposit_paid=request.deposit_paid,
            currency=request.currency,
            notes=request.notes,
            created_at=now,
            updated_at=now,
        )

    def _ensure_available(self, provider_id: str, interval: Interval) -> None:
        conflicts = self._detector.find_conflicts(provider_id, interval)
        if conflicts:
            self._logger.info(
                "Requested interval unavailable",
                extra={"provider_id": provider_id, "count": len(conflicts)},
            )
            raise SlotUnavailable(provider_id, interval, conflicts)
