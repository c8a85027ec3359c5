from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from booking_engine.api.v1.schemas import (
    AvailabilityRequestSchema,
    AvailabilityResponseSchema,
    BookingCreateSchema,
    BookingSchema,
    CancelSeriesRequestSchema,
    CancelSeriesResponseSchema,
    RecurringBookingCreateSchema,
    RescheduleRequestSchema,
    SlotSchema,
    SlotsResponseSchema,
    TransitionRequestSchema,
)
from booking_engine.application.dto.booking_request import BookingRequest
from booking_engine.application.exceptions import (
    BookingNotFound,
    BookingNotReschedulable,
    IllegalTransition,
    SeriesGenerationFailed,
    SlotUnavailable,
)
from booking_engine.application.use_cases.scheduling import SchedulingService
from booking_engine.domain.entities.interval import Interval
from booking_engine.domain.entities.working_hours import WorkingHours
from booking_engine.wiring.dependencies import get_scheduling_service

router = APIRouter()


def _to_request(req: BookingCreateSchema) -> BookingRequest:
    return BookingRequest(
        tenant_id=req.tenant_id,
        provider_id=req.provider_id,
        customer_id=req.customer_id,
        service_id=req.service_id,
        interval=Interval(req.start_time, req.end_time),
        base_price=req.base_price,
        addons_price=req.addons_price,
        total_price=req.total_price,
        deposit_paid=req.deposit_paid,
        currency=req.currency,
        notes=req.notes,
    )


@router.post("/bookings", response_model=BookingSchema, status_code=201)
def create_booking(
    req: BookingCreateSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        booking = service.book(_to_request(req))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SlotUnavailable as e:
        raise HTTPException(status_code=409, detail=str(e))
    return BookingSchema.from_entity(booking)


@router.post("/bookings/recurring", response_model=list[BookingSchema], status_code=201)
def create_recurring_booking(
    req: RecurringBookingCreateSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        bookings = service.book_recurring(_to_request(req), req.pattern, req.occurrence_count)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (SlotUnavailable, SeriesGenerationFailed) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return [BookingSchema.from_entity(b) for b in bookings]


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        return BookingSchema.from_entity(service.get_booking(booking_id))
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/bookings/{booking_id}/transitions", response_model=BookingSchema)
def transition_booking(
    booking_id: UUID,
    req: TransitionRequestSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        booking = service.transition(booking_id, req.target_status, req.actor, req.reason)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IllegalTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return BookingSchema.from_entity(booking)


@router.post("/bookings/{booking_id}/reschedule", response_model=BookingSchema)
def reschedule_booking(
    booking_id: UUID,
    req: RescheduleRequestSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        booking = service.reschedule(booking_id, Interval(req.start_time, req.end_time))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (SlotUnavailable, BookingNotReschedulable) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return BookingSchema.from_entity(booking)


@router.get("/series/{parent_booking_id}", response_model=list[BookingSchema])
def get_series(
    parent_booking_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        return [BookingSchema.from_entity(b) for b in service.get_series(parent_booking_id)]
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/series/{parent_booking_id}/cancel", response_model=CancelSeriesResponseSchema)
def cancel_series(
    parent_booking_id: UUID,
    req: CancelSeriesRequestSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        cancelled = service.cancel_series(parent_booking_id, req.reason)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CancelSeriesResponseSchema(parent_booking_id=parent_booking_id, cancelled=cancelled)


@router.post("/providers/{provider_id}/availability", response_model=AvailabilityResponseSchema)
def check_availability(
    provider_id: str,
    req: AvailabilityRequestSchema,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        result = service.check_availability(provider_id, Interval(req.start_time, req.end_time))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return AvailabilityResponseSchema.from_result(result)


@router.get("/providers/{provider_id}/schedule", response_model=list[BookingSchema])
def provider_schedule(
    provider_id: str,
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        bookings = service.provider_schedule(provider_id, Interval(start, end))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [BookingSchema.from_entity(b) for b in bookings]


@router.get("/providers/{provider_id}/slots", response_model=SlotsResponseSchema)
def available_slots(
    provider_id: str,
    day: date = Query(..., alias="date"),
    duration_minutes: int = Query(..., gt=0),
    working_hours_start: str | None = Query(None),
    working_hours_end: str | None = Query(None),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        working_hours = None
        if working_hours_start or working_hours_end:
            working_hours = WorkingHours.parse(working_hours_start or "09:00", working_hours_end or "24:00")
        slots = service.available_slots(provider_id, day, duration_minutes, working_hours)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SlotsResponseSchema(
        provider_id=provider_id,
        day=day,
        duration_minutes=duration_minutes,
        slots=[SlotSchema.from_interval(s) for s in slots],
    )
