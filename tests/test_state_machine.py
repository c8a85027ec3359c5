"""
Tests for the booking lifecycle state machine.
"""

from __future__ import annotations

import itertools

import pytest

from booking_engine.domain import state_machine
from booking_engine.domain.entities.booking import SYSTEM_ACTOR, BookingStatus
from booking_engine.domain.exceptions import IllegalTransition
from booking_engine.domain.state_machine import TRANSITIONS, StatusChange, apply_transition
from factories import at, make_booking

LEGAL_PAIRS = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
    (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED),
    (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED),
    (BookingStatus.IN_PROGRESS, BookingStatus.NO_SHOW),
}
# Re-confirming is accepted as a no-op for retried requests.
IDEMPOTENT_PAIRS = {(BookingStatus.CONFIRMED, BookingStatus.CONFIRMED)}
ALL_PAIRS = set(itertools.product(BookingStatus, BookingStatus))


def test_transition_table_matches_status_graph():
    table_pairs = {(src, dst) for src, targets in TRANSITIONS.items() for dst in targets}
    assert table_pairs == LEGAL_PAIRS


@pytest.mark.parametrize("current,target", sorted(LEGAL_PAIRS))
def test_legal_transitions_succeed(current, target):
    booking = make_booking(at(10), at(11), status=current)
    updated = apply_transition(booking, target, actor="user-1", reason="r", now=at(12))
    assert updated.status == target
    assert booking.status == current


@pytest.mark.parametrize("current,target", sorted(ALL_PAIRS - LEGAL_PAIRS - IDEMPOTENT_PAIRS))
def test_illegal_transitions_raise(current, target):
    booking = make_booking(at(10), at(11), status=current)
    with pytest.raises(IllegalTransition) as exc_info:
        apply_transition(booking, target, actor="user-1", reason=None, now=at(12))
    assert exc_info.value.from_status == current
    assert exc_info.value.to_status == target


def test_confirm_is_idempotent_on_confirmed():
    booking = make_booking(at(10), at(11), status=BookingStatus.CONFIRMED)
    assert state_machine.confirm(booking) is booking


def test_complete_sets_completed_at():
    booking = make_booking(at(10), at(11), status=BookingStatus.IN_PROGRESS)
    completed = state_machine.complete(booking, now=at(11, 5))
    assert completed.status == BookingStatus.COMPLETED
    assert completed.completed_at == at(11, 5)
    assert completed.cancelled_at is None


def test_cancel_records_actor_and_reason():
    booking = make_booking(at(10), at(11), status=BookingStatus.PENDING)
    cancelled = state_machine.cancel(booking, by=SYSTEM_ACTOR, reason="weather", now=at(8))
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancelled_at == at(8)
    assert cancelled.cancelled_by == "system"
    assert cancelled.cancellation_reason == "weather"
    assert not cancelled.is_active


@pytest.mark.parametrize("status", [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW])
def test_terminal_states_reject_every_operation(status):
    booking = make_booking(at(10), at(11), status=status)
    for operation in (
        state_machine.confirm,
        state_machine.start,
        state_machine.mark_no_show,
        lambda b: state_machine.complete(b, at(12)),
        lambda b: state_machine.cancel(b, "user-1", None, at(12)),
    ):
        with pytest.raises(IllegalTransition):
            operation(booking)


def test_status_change_applies_lifecycle_fields_only():
    booking = make_booking(at(10), at(11), status=BookingStatus.PENDING, notes="gate code 1234")
    cancelled = state_machine.cancel(booking, by="customer-1", reason="moved", now=at(9))
    change = StatusChange.from_booking(cancelled, updated_at=at(9))

    applied = change.apply(booking)

    assert applied.status == BookingStatus.CANCELLED
    assert applied.cancelled_by == "customer-1"
    assert applied.updated_at == at(9)
    assert applied.notes == "gate code 1234"
    assert applied.interval == booking.interval
