from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class ServiceType(str, Enum):
    HAIRCUT = "HAIRCUT"
    BEARD_TRIM = "BEARD_TRIM"
    HAIR_WASH = "HAIR_WASH"
    FULL_SERVICE = "FULL_SERVICE"

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=SERVICE_DURATION_MINUTES[self])


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


SERVICE_DURATION_MINUTES: dict[ServiceType, int] = {
    ServiceType.HAIRCUT: 30,
    ServiceType.BEARD_TRIM: 15,
    ServiceType.HAIR_WASH: 20,
    ServiceType.FULL_SERVICE: 60,
}


def calculate_end_time(start_time: datetime, service_type: ServiceType) -> datetime:
    return start_time + service_type.duration


@dataclass(frozen=True)
class Booking:
    id: str | None
    user_id: str
    barber_id: str
    start_time: datetime
    end_time: datetime
    service_type: ServiceType
    status: BookingStatus = BookingStatus.PENDING
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @staticmethod
    def new(
        user_id: str,
        barber_id: str,
        start_time: datetime,
        service_type: ServiceType,
        notes: str = "",
    ) -> "Booking":
        """Build an unsaved pending booking; the store assigns id and timestamps."""
        return Booking(
            id=None,
            user_id=user_id,
            barber_id=barber_id,
            start_time=start_time,
            end_time=calculate_end_time(start_time, service_type),
            service_type=service_type,
            status=BookingStatus.PENDING,
            notes=notes or "",
        )


@dataclass(frozen=True)
class TimeSlot:
    start_time: datetime
    end_time: datetime
