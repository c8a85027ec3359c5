from __future__ import annotations

from datetime import datetime, timezone

import pytest

from booking_engine.application.use_cases.scheduling import SchedulingService
from booking_engine.infrastructure.clock.fixed_clock import FixedClock
from booking_engine.infrastructure.store.memory_store import MemoryBookingStore


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def service(store: MemoryBookingStore, clock: FixedClock) -> SchedulingService:
    return SchedulingService(store=store, clock=clock, timezone=timezone.utc)
