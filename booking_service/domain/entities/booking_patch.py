from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from booking_service.domain.entities.booking import ServiceType


@dataclass(frozen=True)
class BookingPatch:
    """Caller-supplied changes to a booking. ``None`` means "leave as is"."""

    start_time: datetime | None = None
    service_type: ServiceType | None = None
    notes: str | None = None


@dataclass(frozen=True)
class BookingUpdate:
    """Field set handed to the repository; ``end_time`` is already recomputed."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    service_type: ServiceType | None = None
    notes: str | None = None
