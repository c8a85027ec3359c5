"""
Tests for recurring series expansion and tail cancellation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from booking_engine.application.exceptions import BookingNotFound, SeriesGenerationFailed
from booking_engine.application.use_cases.conflicts import ConflictDetector
from booking_engine.application.use_cases.recurrence import RecurrenceExpander, plan_occurrences
from booking_engine.domain.entities.booking import BookingStatus, RecurrencePattern
from booking_engine.domain.state_machine import StatusChange
from booking_engine.infrastructure.store.memory_store import MemoryBookingStore
from factories import at, make_booking


class StaleReadStore(MemoryBookingStore):
    """Store whose reads miss a concurrent writer, so only the write-time check catches conflicts."""

    def find_active_bookings(self, provider_id, window=None):
        return []


@pytest.fixture
def expander(store, clock) -> RecurrenceExpander:
    return RecurrenceExpander(store, ConflictDetector(store), clock)


@pytest.fixture
def parent():
    return make_booking(
        at(10),
        at(11),
        status=BookingStatus.CONFIRMED,
        is_recurring=True,
        recurrence_pattern=RecurrencePattern.WEEKLY,
        base_price=Decimal("80"),
        addons_price=Decimal("20"),
        total_price=Decimal("100"),
        deposit_paid=Decimal("25"),
        currency="EUR",
        notes="side gate",
    )


@pytest.mark.parametrize(
    "pattern,days",
    [(RecurrencePattern.WEEKLY, 7), (RecurrencePattern.BIWEEKLY, 14), (RecurrencePattern.MONTHLY, 30)],
)
def test_plan_steps_by_fixed_stride(parent, pattern, days):
    parent = replace(parent, recurrence_pattern=pattern)
    occurrences = plan_occurrences(parent, 3, pattern)

    assert [o.start_time for o in occurrences] == [parent.start_time + timedelta(days=days * i) for i in (1, 2, 3)]
    assert [o.end_time for o in occurrences] == [parent.end_time + timedelta(days=days * i) for i in (1, 2, 3)]


def test_monthly_stride_drifts_from_calendar_months(parent):
    parent = replace(parent, recurrence_pattern=RecurrencePattern.MONTHLY)
    occurrences = plan_occurrences(parent, 2, RecurrencePattern.MONTHLY)
    # June 1 + 30 days is July 1, + 60 days is July 31 (not August 1).
    assert occurrences[0].start_time == at(10, day=1, month=7)
    assert occurrences[1].start_time == at(10, day=31, month=7)


def test_occurrences_copy_parent_fields(parent):
    occurrence = plan_occurrences(parent, 1, RecurrencePattern.WEEKLY)[0]

    assert occurrence.id != parent.id
    assert occurrence.status == BookingStatus.PENDING
    assert occurrence.is_recurring is True
    assert occurrence.recurrence_pattern == RecurrencePattern.WEEKLY
    assert occurrence.parent_booking_id == parent.id
    assert (occurrence.provider_id, occurrence.customer_id, occurrence.service_id) == (
        parent.provider_id,
        parent.customer_id,
        parent.service_id,
    )
    assert occurrence.total_price == Decimal("100")
    assert occurrence.addons_price == Decimal("20")
    assert occurrence.currency == "EUR"
    assert occurrence.notes == "side gate"
    assert occurrence.deposit_paid == Decimal("0")
    assert occurrence.duration_minutes == 60


def test_plan_rejects_bad_input(parent):
    with pytest.raises(ValueError):
        plan_occurrences(parent, 0, RecurrencePattern.WEEKLY)
    with pytest.raises(ValueError):
        plan_occurrences(parent, 2, RecurrencePattern.MONTHLY)


def test_expand_persists_occurrences_for_stored_parent(store, expander, parent):
    store.create_booking(parent)

    created = expander.expand(parent, 4, RecurrencePattern.WEEKLY)

    assert len(created) == 4
    series = store.find_series(parent.id)
    assert [b.id for b in series] == [parent.id, *(b.id for b in created)]


def test_colliding_occurrence_aborts_whole_batch(store, expander, parent):
    """If occurrence 3 of 5 collides, nothing from the request is stored."""
    store.create_booking(parent)
    blocker = make_booking(at(10, 30, day=22), at(11, 30, day=22), customer_id="customer-2")
    store.create_booking(blocker)

    with pytest.raises(SeriesGenerationFailed) as exc_info:
        expander.expand(parent, 5, RecurrencePattern.WEEKLY)

    assert exc_info.value.failed_index == 3
    assert exc_info.value.conflicting_booking == blocker
    assert len(store.all_bookings()) == 2


def test_occurrences_longer_than_stride_collide_with_siblings(store, expander):
    long_job = make_booking(at(9), at(9, day=10), status=BookingStatus.PENDING)

    with pytest.raises(SeriesGenerationFailed) as exc_info:
        expander.expand(long_job, 2, RecurrencePattern.WEEKLY, include_parent=True)

    assert exc_info.value.failed_index == 1
    assert exc_info.value.conflicting_booking.id == long_job.id
    assert store.all_bookings() == []


def test_write_time_conflict_is_reported_as_series_failure(clock, parent):
    store = StaleReadStore()
    blocker = make_booking(at(10, day=15), at(11, day=15), customer_id="customer-2")
    store.create_booking(blocker)
    expander = RecurrenceExpander(store, ConflictDetector(store), clock)

    with pytest.raises(SeriesGenerationFailed) as exc_info:
        expander.expand(parent, 3, RecurrencePattern.WEEKLY, include_parent=True)

    assert exc_info.value.failed_index == 2
    assert exc_info.value.conflicting_booking == blocker
    assert store.all_bookings() == [blocker]


def test_cancel_series_only_touches_future_open_occurrences(store, clock, expander, parent):
    """Completed past occurrences stay; future pending/confirmed ones are cancelled."""
    store.create_booking(parent)
    first, second, third = expander.expand(parent, 3, RecurrencePattern.WEEKLY)

    # The root was completed; root and first occurrence are now in the past.
    store.update_booking_status(
        parent.id,
        StatusChange(status=BookingStatus.COMPLETED),
        expected_status=BookingStatus.CONFIRMED,
    )
    store.update_booking_status(
        second.id,
        StatusChange(status=BookingStatus.CONFIRMED),
        expected_status=BookingStatus.PENDING,
    )
    clock.set(at(12, day=8))

    cancelled = expander.cancel_series(parent.id, "customer moved away")

    assert cancelled == 2
    by_id = {b.id: b for b in store.find_series(parent.id)}
    assert by_id[parent.id].status == BookingStatus.COMPLETED
    assert by_id[first.id].status == BookingStatus.PENDING
    assert by_id[second.id].status == BookingStatus.CANCELLED
    assert by_id[third.id].status == BookingStatus.CANCELLED
    assert by_id[third.id].cancelled_by == "system"
    assert by_id[third.id].cancellation_reason == "customer moved away"
    assert by_id[third.id].cancelled_at == at(12, day=8)


def test_cancel_series_twice_cancels_nothing_more(store, expander, parent):
    store.create_booking(parent)
    expander.expand(parent, 2, RecurrencePattern.WEEKLY)

    assert expander.cancel_series(parent.id, None) == 3
    assert expander.cancel_series(parent.id, None) == 0


def test_cancel_unknown_series_raises(expander, parent):
    with pytest.raises(BookingNotFound):
        expander.cancel_series(parent.id, "nope")
