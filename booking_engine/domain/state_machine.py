"""
Booking lifecycle state machine.

Every status change goes through one of the named operations below. They are
pure: each returns an updated copy of the booking and leaves persisting it to
the caller, which writes the resulting ``StatusChange`` in one storage update.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from booking_engine.domain.entities.booking import Booking, BookingStatus
from booking_engine.domain.exceptions import IllegalTransition


TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.IN_PROGRESS: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


@dataclass(frozen=True)
class StatusChange:
    """The lifecycle fields a transition writes, applied as a single update."""

    status: BookingStatus
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_booking(cls, booking: Booking, updated_at: datetime | None = None) -> StatusChange:
        return cls(
            status=booking.status,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            cancelled_by=booking.cancelled_by,
            cancellation_reason=booking.cancellation_reason,
            updated_at=updated_at,
        )

    def apply(self, booking: Booking) -> Booking:
        return replace(
            booking,
            status=self.status,
            completed_at=self.completed_at,
            cancelled_at=self.cancelled_at,
            cancelled_by=self.cancelled_by,
            cancellation_reason=self.cancellation_reason,
            updated_at=self.updated_at or booking.updated_at,
        )


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def assert_transition(current: BookingStatus, target: BookingStatus) -> None:
    if not can_transition(current, target):
        raise IllegalTransition(current, target)


def confirm(booking: Booking) -> Booking:
    # Re-confirming is a no-op so retried requests succeed.
    if booking.status == BookingStatus.CONFIRMED:
        return booking
    assert_transition(booking.status, BookingStatus.CONFIRMED)
    return replace(booking, status=BookingStatus.CONFIRMED)


def start(booking: Booking) -> Booking:
    assert_transition(booking.status, BookingStatus.IN_PROGRESS)
    return replace(booking, status=BookingStatus.IN_PROGRESS)


def complete(booking: Booking, now: datetime) -> Booking:
    assert_transition(booking.status, BookingStatus.COMPLETED)
    return replace(booking, status=BookingStatus.COMPLETED, completed_at=now)


def cancel(booking: Booking, by: str, reason: str | None, now: datetime) -> Booking:
    assert_transition(booking.status, BookingStatus.CANCELLED)
    return replace(
        booking,
        status=BookingStatus.CANCELLED,
        cancelled_at=now,
        cancelled_by=by,
        cancellation_reason=reason,
    )


def mark_no_show(booking: Booking) -> Booking:
    assert_transition(booking.status, BookingStatus.NO_SHOW)
    return replace(booking, status=BookingStatus.NO_SHOW)


def apply_transition(
    booking: Booking,
    target: BookingStatus,
    actor: str,
    reason: str | None,
    now: datetime,
) -> Booking:
    """Dispatch a requested target status to its named operation."""
    if target == BookingStatus.CONFIRMED:
        return confirm(booking)
    if target == BookingStatus.IN_PROGRESS:
        return start(booking)
    if target == BookingStatus.COMPLETED:
        return complete(booking, now)
    if target == BookingStatus.CANCELLED:
        return cancel(booking, by=actor, reason=reason, now=now)
    if target == BookingStatus.NO_SHOW:
        return mark_no_show(booking)
    # Nothing ever transitions back to pending.
    raise IllegalTransition(booking.status, target)
