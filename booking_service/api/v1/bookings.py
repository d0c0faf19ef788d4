from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from booking_service.api.security import ensure_barber, ensure_can_act_for_user, get_caller
from booking_service.api.v1.schemas import (
    BookingListSchema,
    BookingSchema,
    CancelBookingRequestSchema,
    CancelBookingResponseSchema,
    CreateBookingRequestSchema,
    GetAvailableTimeSlotsRequestSchema,
    GetBarberBookingsRequestSchema,
    GetBookingRequestSchema,
    GetUserBookingsRequestSchema,
    TimeSlotListSchema,
    TimeSlotSchema,
    UpdateBookingRequestSchema,
)
from booking_service.application.exceptions import (
    BookingError,
    BookingNotFoundError,
    InvalidInputError,
    PermissionDeniedError,
    SchedulingConflictError,
)
from booking_service.application.use_cases.booking import BookingUseCase
from booking_service.application.utils.date_parser import parse_day, parse_rfc3339
from booking_service.domain.entities.booking_patch import BookingPatch
from booking_service.domain.entities.caller import CallerIdentity
from booking_service.wiring.dependencies import get_booking_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_http_error(method: str, e: BookingError) -> HTTPException:
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, BookingNotFoundError):
        return HTTPException(status_code=404, detail="booking not found")
    if isinstance(e, SchedulingConflictError):
        return HTTPException(status_code=409, detail=str(e))
    logger.error("RPC failed", extra={"method": method, "error": str(e)})
    return HTTPException(status_code=500, detail=f"failed to {method}: {e}")


@router.post("/CreateBooking", response_model=BookingSchema)
def create_booking(
    req: CreateBookingRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        ensure_can_act_for_user(caller, req.user_id)
        booking = uc.create(
            user_id=req.user_id,
            barber_id=req.barber_id,
            start_time=parse_rfc3339(req.start_time),
            service_type=req.service_type,
            notes=req.notes,
        )
    except BookingError as e:
        raise _to_http_error("create booking", e)

    return BookingSchema.from_entity(booking)


@router.post("/GetBooking", response_model=BookingSchema)
def get_booking(
    req: GetBookingRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        booking = uc.get(req.id)
        ensure_can_act_for_user(caller, booking.user_id)
    except BookingError as e:
        raise _to_http_error("get booking", e)

    return BookingSchema.from_entity(booking)


@router.post("/UpdateBooking", response_model=BookingSchema)
def update_booking(
    req: UpdateBookingRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        ensure_can_act_for_user(caller, uc.get(req.id).user_id)
        patch = BookingPatch(
            start_time=parse_rfc3339(req.start_time) if req.start_time else None,
            service_type=req.service_type,
            notes=req.notes,
        )
        booking = uc.update(req.id, patch)
    except BookingError as e:
        raise _to_http_error("update booking", e)

    return BookingSchema.from_entity(booking)


@router.post("/CancelBooking", response_model=CancelBookingResponseSchema)
def cancel_booking(
    req: CancelBookingRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        try:
            ensure_can_act_for_user(caller, uc.get(req.id).user_id)
        except BookingNotFoundError:
            pass  # cancel reports "no change" for unknown ids
        success = uc.cancel(req.id)
    except BookingError as e:
        raise _to_http_error("cancel booking", e)

    message = "Booking cancelled successfully" if success else "Booking not found or already cancelled"
    return CancelBookingResponseSchema(success=success, message=message)


@router.post("/GetUserBookings", response_model=BookingListSchema)
def get_user_bookings(
    req: GetUserBookingsRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        ensure_can_act_for_user(caller, req.user_id)
        bookings = uc.list_for_user(req.user_id)
    except BookingError as e:
        raise _to_http_error("get user bookings", e)

    return BookingListSchema(bookings=[BookingSchema.from_entity(b) for b in bookings])


@router.post("/GetBarberBookings", response_model=BookingListSchema)
def get_barber_bookings(
    req: GetBarberBookingsRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        ensure_barber(caller)
        day = parse_day(req.date) if req.date else None
        bookings = uc.list_for_barber(req.barber_id, day)
    except BookingError as e:
        raise _to_http_error("get barber bookings", e)

    return BookingListSchema(bookings=[BookingSchema.from_entity(b) for b in bookings])


@router.post("/GetAvailableTimeSlots", response_model=TimeSlotListSchema)
def get_available_time_slots(
    req: GetAvailableTimeSlotsRequestSchema,
    caller: CallerIdentity = Depends(get_caller),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        slots = uc.available_slots(req.barber_id, parse_day(req.date))
    except BookingError as e:
        raise _to_http_error("get available time slots", e)

    return TimeSlotListSchema(time_slots=[TimeSlotSchema.from_entity(s) for s in slots])
