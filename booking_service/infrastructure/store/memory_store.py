from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.domain.entities.booking import Booking, BookingStatus
from booking_service.domain.entities.booking_patch import BookingUpdate


class MemoryBookingRepository(BookingRepositoryPort):
    def __init__(self) -> None:
        # dicts keep insertion order, which is creation order here
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()

    def create(self, booking: Booking) -> Booking:
        now = _utcnow()
        stored = replace(
            booking,
            id=booking.id or uuid.uuid4().hex,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._bookings[stored.id] = stored
        return stored

    def get_by_id(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def update_partial(self, booking_id: str, update: BookingUpdate) -> Booking | None:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                return None
            changes = {
                key: value
                for key, value in (
                    ("start_time", update.start_time),
                    ("end_time", update.end_time),
                    ("service_type", update.service_type),
                    ("notes", update.notes),
                )
                if value is not None
            }
            updated = replace(current, updated_at=_utcnow(), **changes)
            self._bookings[booking_id] = updated
            return updated

    def cancel(self, booking_id: str) -> bool:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None or current.is_cancelled:
                return False
            self._bookings[booking_id] = replace(
                current,
                status=BookingStatus.CANCELLED,
                updated_at=_utcnow(),
            )
            return True

    def list_by_user(self, user_id: str) -> list[Booking]:
        return [b for b in self._snapshot() if b.user_id == user_id]

    def list_by_barber(
        self,
        barber_id: str,
        window: tuple[datetime, datetime] | None = None,
    ) -> list[Booking]:
        bookings = [b for b in self._snapshot() if b.barber_id == barber_id]
        if window is not None:
            window_start, window_end = window
            bookings = [b for b in bookings if window_start <= b.start_time < window_end]
        return bookings

    def list_overlapping(self, barber_id: str, start: datetime, end: datetime) -> list[Booking]:
        return [
            b
            for b in self._snapshot()
            if b.barber_id == barber_id and not b.is_cancelled and matches_overlap_filter(b, start, end)
        ]

    def _snapshot(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings.values())


def matches_overlap_filter(booking: Booking, start: datetime, end: datetime) -> bool:
    starts_inside = start <= booking.start_time < end
    ends_inside = start < booking.end_time <= end
    spans_window = booking.start_time <= start and booking.end_time >= end
    return starts_inside or ends_inside or spans_window


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
