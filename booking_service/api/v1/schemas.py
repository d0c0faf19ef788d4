from pydantic import BaseModel, ConfigDict, Field

from booking_service.application.utils.date_parser import format_rfc3339
from booking_service.domain.entities.booking import Booking, BookingStatus, ServiceType, TimeSlot


class RpcSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateBookingRequestSchema(RpcSchema):
    user_id: str = Field(alias="userId", min_length=1)
    barber_id: str = Field(alias="barberId", min_length=1)
    start_time: str = Field(alias="startTime")
    service_type: ServiceType = Field(alias="serviceType")
    notes: str = ""


class GetBookingRequestSchema(RpcSchema):
    id: str


class UpdateBookingRequestSchema(RpcSchema):
    id: str
    start_time: str | None = Field(default=None, alias="startTime")
    service_type: ServiceType | None = Field(default=None, alias="serviceType")
    notes: str | None = None


class CancelBookingRequestSchema(RpcSchema):
    id: str


class CancelBookingResponseSchema(RpcSchema):
    success: bool
    message: str


class GetUserBookingsRequestSchema(RpcSchema):
    user_id: str = Field(alias="userId")


class GetBarberBookingsRequestSchema(RpcSchema):
    barber_id: str = Field(alias="barberId")
    date: str | None = None


class GetAvailableTimeSlotsRequestSchema(RpcSchema):
    barber_id: str = Field(alias="barberId")
    date: str


class BookingSchema(RpcSchema):
    id: str
    user_id: str = Field(alias="userId")
    barber_id: str = Field(alias="barberId")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    service_type: ServiceType = Field(alias="serviceType")
    status: BookingStatus
    notes: str = ""
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    @staticmethod
    def from_entity(booking: Booking) -> "BookingSchema":
        return BookingSchema(
            id=booking.id or "",
            user_id=booking.user_id,
            barber_id=booking.barber_id,
            start_time=format_rfc3339(booking.start_time),
            end_time=format_rfc3339(booking.end_time),
            service_type=booking.service_type,
            status=booking.status,
            notes=booking.notes,
            created_at=format_rfc3339(booking.created_at) if booking.created_at else None,
            updated_at=format_rfc3339(booking.updated_at) if booking.updated_at else None,
        )


class BookingListSchema(RpcSchema):
    bookings: list[BookingSchema] = Field(default_factory=list)


class TimeSlotSchema(RpcSchema):
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    @staticmethod
    def from_entity(slot: TimeSlot) -> "TimeSlotSchema":
        return TimeSlotSchema(
            start_time=format_rfc3339(slot.start_time),
            end_time=format_rfc3339(slot.end_time),
        )


class TimeSlotListSchema(RpcSchema):
    time_slots: list[TimeSlotSchema] = Field(default_factory=list, alias="timeSlots")
