from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from booking_engine.domain.entities.interval import Interval


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


# Active bookings occupy their interval; terminal ones never do.
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW})


class RecurrencePattern(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @property
    def stride(self) -> timedelta:
        return RECURRENCE_STRIDES[self]


# "monthly" is a fixed 30-day stride, not a calendar month.
RECURRENCE_STRIDES: dict[RecurrencePattern, timedelta] = {
    RecurrencePattern.WEEKLY: timedelta(days=7),
    RecurrencePattern.BIWEEKLY: timedelta(days=14),
    RecurrencePattern.MONTHLY: timedelta(days=30),
}


SYSTEM_ACTOR = "system"


@dataclass(frozen=True)
class Booking:
    tenant_id: str
    provider_id: str
    customer_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    duration_minutes: int | None = None  # derived from the interval when omitted

    status: BookingStatus = BookingStatus.PENDING
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None

    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    parent_booking_id: uuid.UUID | None = None

    # Owned by the payments collaborator; read here only for validation
    base_price: Decimal = Decimal("0")
    addons_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    deposit_paid: Decimal = Decimal("0")
    currency: str = "USD"

    notes: str | None = None

    # Owned by the reminder dispatcher
    reminder_sent_24h: bool = False
    reminder_sent_1h: bool = False

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        interval = Interval(self.start_time, self.end_time)
        if self.duration_minutes is None:
            object.__setattr__(self, "duration_minutes", interval.duration_minutes)

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_series_root(self) -> bool:
        return self.is_recurring and self.parent_booking_id is None

    def overlaps(self, interval: Interval) -> bool:
        return self.interval.overlaps(interval)
