from __future__ import annotations

import logging
from dataclasses import replace
from typing import NoReturn
from uuid import UUID, uuid4

from booking_engine.application.exceptions import BookingNotFound, SeriesGenerationFailed, SlotUnavailable
from booking_engine.application.ports.booking_store import BookingStorePort
from booking_engine.application.ports.clock import ClockPort
from booking_engine.application.use_cases.conflicts import ConflictDetector, find_conflicts
from booking_engine.domain import state_machine
from booking_engine.domain.entities.booking import SYSTEM_ACTOR, Booking, BookingStatus, RecurrencePattern
from booking_engine.domain.state_machine import StatusChange


def plan_occurrences(parent: Booking, occurrence_count: int, pattern: RecurrencePattern) -> list[Booking]:
    """Derive occurrences 1..occurrence_count of a series from its root booking."""
    if occurrence_count < 1:
        raise ValueError("occurrence_count must be positive")
    if parent.recurrence_pattern is not None and parent.recurrence_pattern != pattern:
        raise ValueError(
            f"Pattern {pattern.value} does not match the parent's {parent.recurrence_pattern.value}"
        )

    occurrences: list[Booking] = []
    for i in range(1, occurrence_count + 1):
        shift = pattern.stride * i
        occurrences.append(
            Booking(
                id=uuid4(),
                tenant_id=parent.tenant_id,
                provider_id=parent.provider_id,
                customer_id=parent.customer_id,
                service_id=parent.service_id,
                start_time=parent.start_time + shift,
                end_time=parent.end_time + shift,
                duration_minutes=parent.duration_minutes,
                status=BookingStatus.PENDING,
                is_recurring=True,
                recurrence_pattern=pattern,
                parent_booking_id=parent.id,
                base_price=parent.base_price,
                addons_price=parent.addons_price,
                total_price=parent.total_price,
                currency=parent.currency,
                notes=parent.notes,
                created_at=parent.created_at,
                updated_at=parent.created_at,
            )
        )
    return occurrences


class RecurrenceExpander:
    def __init__(self, store: BookingStorePort, detector: ConflictDetector, clock: ClockPort) -> None:
        self._store = store
        self._detector = detector
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def expand(
        self,
        parent: Booking,
        occurrence_count: int,
        pattern: RecurrencePattern,
        include_parent: bool = False,
    ) -> list[Booking]:
        """
        Generate and persist the occurrences of a series, all or nothing.

        With include_parent=True the (not yet stored) parent is written in the
        same batch, so a failed series leaves no trace at all.
        """
        if include_parent:
            parent = replace(parent, is_recurring=True, recurrence_pattern=pattern)
        occurrences = plan_occurrences(parent, occurrence_count, pattern)

        # Long bookings with a short stride can also collide with their own siblings.
        planned = [parent] if include_parent else []
        for index, occurrence in enumerate(occurrences, start=1):
            conflicts = self._detector.find_conflicts(occurrence.provider_id, occurrence.interval)
            conflicts = conflicts or find_conflicts(occurrence.interval, planned)
            if conflicts:
                self._reject(parent, index, conflicts[0])
            planned.append(occurrence)

        batch = [parent, *occurrences] if include_parent else occurrences
        try:
            created = self._store.create_booking_batch(batch)
        except SlotUnavailable as e:
            # Lost a race against a concurrent write between the check and the batch insert.
            failed_index = next(
                (i for i, b in enumerate(batch, start=0 if include_parent else 1) if b.interval == e.interval),
                0,
            )
            conflicting = e.conflicting[0] if e.conflicting else None
            self._reject(parent, failed_index, conflicting, cause=e)

        self._logger.info(
            "Recurring series expanded",
            extra={"booking_id": str(parent.id), "count": len(occurrences)},
        )
        return created

    def cancel_series(self, parent_booking_id: UUID, reason: str | None) -> int:
        """Cancel the future, non-terminal tail of a series; past or finished bookings stay as they are."""
        series = self.series(parent_booking_id)
        now = self._clock.now()
        cancelled = 0
        for booking in series:
            if booking.start_time <= now or booking.is_terminal:
                continue
            updated = state_machine.cancel(booking, by=SYSTEM_ACTOR, reason=reason, now=now)
            self._store.update_booking_status(
                booking.id,
                StatusChange.from_booking(updated, updated_at=now),
                expected_status=booking.status,
            )
            cancelled += 1

        self._logger.info(
            "Recurring series cancelled",
            extra={"booking_id": str(parent_booking_id), "count": cancelled, "reason": reason},
        )
        return cancelled

    def series(self, parent_booking_id: UUID) -> list[Booking]:
        """Root plus occurrences, by start. Ids of occurrences or one-off bookings are not series."""
        series = self._store.find_series(parent_booking_id)
        root = next((b for b in series if b.id == parent_booking_id), None)
        if root is None or not root.is_series_root:
            raise BookingNotFound(parent_booking_id)
        return series

    def _reject(
        self,
        parent: Booking,
        failed_index: int,
        conflicting: Booking | None,
        cause: Exception | None = None,
    ) -> NoReturn:
        self._logger.info(
            "Recurring series rejected",
            extra={"booking_id": str(parent.id), "failed_index": failed_index},
        )
        raise SeriesGenerationFailed(failed_index, conflicting) from cause
