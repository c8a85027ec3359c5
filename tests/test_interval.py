from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.exceptions import InvalidInterval
from factories import at, make_booking


def test_interval_rejects_empty_and_reversed_ranges():
    with pytest.raises(InvalidInterval):
        Interval(at(10), at(10))
    with pytest.raises(InvalidInterval):
        Interval(at(11), at(10))


def test_invalid_interval_is_a_value_error():
    with pytest.raises(ValueError):
        Interval(at(11), at(10))


def test_overlap_is_symmetric():
    a = Interval(at(10), at(11))
    b = Interval(at(10, 30), at(11, 30))
    assert a.overlaps(b)
    assert b.overlaps(a)


def test_touching_boundary_is_not_an_overlap():
    """An interval ending at T and one starting at T do not overlap."""
    a = Interval(at(10), at(11))
    b = Interval(at(11), at(12))
    assert not a.overlaps(b)
    assert not b.overlaps(a)


def test_containment_overlaps():
    outer = Interval(at(9), at(12))
    inner = Interval(at(10), at(11))
    assert outer.overlaps(inner)
    assert inner.overlaps(outer)


def test_from_duration_and_shift():
    interval = Interval.from_duration(at(9), 90)
    assert interval.end == at(10, 30)
    assert interval.duration_minutes == 90
    assert interval.shifted(timedelta(days=7)) == Interval(at(9, day=8), at(10, 30, day=8))


def test_booking_derives_duration_and_validates_interval():
    booking = make_booking(at(10), at(11, 15))
    assert booking.duration_minutes == 75
    assert booking.interval == Interval(at(10), at(11, 15))
    with pytest.raises(InvalidInterval):
        Booking(
            tenant_id="t",
            provider_id="p",
            customer_id="c",
            service_id="s",
            start_time=at(11),
            end_time=at(10),
        )


def test_interval_rejects_mixed_naive_and_aware_times():
    with pytest.raises(InvalidInterval):
        Interval(datetime(2024, 6, 1, 10), at(11))
    with pytest.raises(InvalidInterval):
        Booking(
            tenant_id="t",
            provider_id="p",
            customer_id="c",
            service_id="s",
            start_time=at(10),
            end_time=datetime(2024, 6, 1, 11),
        )


def test_localized_attaches_zone_only_to_naive_intervals():
    naive = Interval(datetime(2024, 6, 1, 10), datetime(2024, 6, 1, 11))
    assert naive.localized(timezone.utc) == Interval(at(10), at(11))

    aware = Interval(at(10), at(11))
    assert aware.localized(timezone(timedelta(hours=2))) is aware
