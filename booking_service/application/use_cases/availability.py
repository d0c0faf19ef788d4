"""
Conflict detection and free-slot enumeration for a barber's calendar.

All intervals are half-open: ``[start, end)``. Two bookings that merely touch
(one ends exactly when the other starts) do not conflict. Cancelled bookings
never take part in a conflict.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from booking_service.application.exceptions import SchedulingConflictError
from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.application.utils.date_parser import working_window
from booking_service.domain.entities.booking import Booking, TimeSlot


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def enumerate_slots(window_start: datetime, window_end: datetime, slot_minutes: int) -> list[TimeSlot]:
    """Fixed-size candidate slots from window_start; a slot starting at or after window_end is dropped."""
    if slot_minutes <= 0:
        raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")
    step = timedelta(minutes=slot_minutes)
    slots: list[TimeSlot] = []
    current = window_start
    while current < window_end:
        slots.append(TimeSlot(start_time=current, end_time=current + step))
        current += step
    return slots


def free_slots(candidates: Iterable[TimeSlot], bookings: Iterable[Booking]) -> list[TimeSlot]:
    active = [b for b in bookings if not b.is_cancelled]
    return [
        slot
        for slot in candidates
        if not any(intervals_overlap(slot.start_time, slot.end_time, b.start_time, b.end_time) for b in active)
    ]


class AvailabilityChecker:
    def __init__(
        self,
        repository: BookingRepositoryPort,
        timezone: ZoneInfo,
        work_start_hour: int = 9,
        work_end_hour: int = 17,
        slot_minutes: int = 30,
    ) -> None:
        if slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")
        if not 0 <= work_start_hour < work_end_hour <= 23:
            raise ValueError(f"invalid working hours: {work_start_hour}-{work_end_hour}")
        self._repository = repository
        self._timezone = timezone
        self._work_start_hour = work_start_hour
        self._work_end_hour = work_end_hour
        self._slot_minutes = slot_minutes
        self._logger = logging.getLogger(__name__)

    def find_conflicts(
        self,
        barber_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        """
        Non-cancelled bookings of the barber overlapping [start, end).

        ``exclude_booking_id`` drops the booking being updated, so it is never judged
        against its own stored record.
        """
        candidates = self._repository.list_overlapping(barber_id, start, end)
        return [
            b
            for b in candidates
            if b.id != exclude_booking_id
            and not b.is_cancelled
            and intervals_overlap(start, end, b.start_time, b.end_time)
        ]

    def ensure_available(
        self,
        barber_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: str | None = None,
        message: str = "barber is not available at the requested time",
    ) -> None:
        conflicts = self.find_conflicts(barber_id, start, end, exclude_booking_id)
        if conflicts:
            conflicting_ids = [b.id for b in conflicts if b.id]
            self._logger.warning(
                "Scheduling conflict",
                extra={
                    "barber_id": barber_id,
                    "start_time": start.isoformat(),
                    "reason": f"overlaps {','.join(conflicting_ids)}",
                },
            )
            raise SchedulingConflictError(message, conflicting_ids)

    def available_slots(self, barber_id: str, day: date) -> list[TimeSlot]:
        window_start, window_end = working_window(
            day, self._timezone, self._work_start_hour, self._work_end_hour
        )
        candidates = enumerate_slots(window_start, window_end, self._slot_minutes)
        bookings = self._repository.list_overlapping(barber_id, window_start, window_end)
        return free_slots(candidates, bookings)
