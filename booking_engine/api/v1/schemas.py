from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from booking_engine.application.dto.availability import Availability
from booking_engine.domain.entities.booking import Booking, BookingStatus, RecurrencePattern
from booking_engine.domain.entities.interval import Interval


class BookingCreateSchema(BaseModel):
    tenant_id: str
    provider_id: str
    customer_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    addons_price: Decimal = Field(default=Decimal("0"), ge=0)
    total_price: Decimal = Field(default=Decimal("0"), ge=0)
    deposit_paid: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    notes: str | None = None


class RecurringBookingCreateSchema(BookingCreateSchema):
    pattern: RecurrencePattern
    occurrence_count: int = Field(ge=1)


class BookingSchema(BaseModel):
    id: UUID
    tenant_id: str
    provider_id: str
    customer_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    status: BookingStatus
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    parent_booking_id: UUID | None = None
    base_price: Decimal
    addons_price: Decimal
    total_price: Decimal
    deposit_paid: Decimal
    currency: str
    notes: str | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> BookingSchema:
        return cls(
            id=booking.id,
            tenant_id=booking.tenant_id,
            provider_id=booking.provider_id,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            duration_minutes=booking.duration_minutes or booking.interval.duration_minutes,
            status=booking.status,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            cancelled_by=booking.cancelled_by,
            cancellation_reason=booking.cancellation_reason,
            is_recurring=booking.is_recurring,
            recurrence_pattern=booking.recurrence_pattern,
            parent_booking_id=booking.parent_booking_id,
            base_price=booking.base_price,
            addons_price=booking.addons_price,
            total_price=booking.total_price,
            deposit_paid=booking.deposit_paid,
            currency=booking.currency,
            notes=booking.notes,
        )


class TransitionRequestSchema(BaseModel):
    target_status: BookingStatus
    actor: str
    reason: str | None = None


class RescheduleRequestSchema(BaseModel):
    start_time: datetime
    end_time: datetime


class CancelSeriesRequestSchema(BaseModel):
    reason: str | None = None


class CancelSeriesResponseSchema(BaseModel):
    parent_booking_id: UUID
    cancelled: int


class AvailabilityRequestSchema(BaseModel):
    start_time: datetime
    end_time: datetime


class AvailabilityResponseSchema(BaseModel):
    provider_id: str
    start_time: datetime
    end_time: datetime
    is_available: bool
    conflicts: list[BookingSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: Availability) -> AvailabilityResponseSchema:
        return cls(
            provider_id=result.provider_id,
            start_time=result.interval.start,
            end_time=result.interval.end,
            is_available=result.is_available,
            conflicts=[BookingSchema.from_entity(b) for b in result.conflicts],
        )


class SlotSchema(BaseModel):
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_interval(cls, interval: Interval) -> SlotSchema:
        return cls(start_time=interval.start, end_time=interval.end)


class SlotsResponseSchema(BaseModel):
    provider_id: str
    day: date
    duration_minutes: int
    slots: list[SlotSchema] = Field(default_factory=list)
