from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from booking_service.application.exceptions import BookingNotFoundError, InvalidInputError
from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.application.use_cases.availability import AvailabilityChecker
from booking_service.application.utils.date_parser import day_window
from booking_service.domain.entities.booking import Booking, ServiceType, TimeSlot, calculate_end_time
from booking_service.domain.entities.booking_patch import BookingPatch, BookingUpdate


class BookingUseCase:
    def __init__(
        self,
        repository: BookingRepositoryPort,
        timezone: ZoneInfo,
        work_start_hour: int = 9,
        work_end_hour: int = 17,
        slot_minutes: int = 30,
    ) -> None:
        self._repository = repository
        self._timezone = timezone
        self._availability = AvailabilityChecker(
            repository=repository,
            timezone=timezone,
            work_start_hour=work_start_hour,
            work_end_hour=work_end_hour,
            slot_minutes=slot_minutes,
        )
        self._logger = logging.getLogger(__name__)

    def create(
        self,
        user_id: str,
        barber_id: str,
        start_time: datetime,
        service_type: ServiceType,
        notes: str = "",
    ) -> Booking:
        if not user_id or not barber_id:
            raise InvalidInputError("userId and barberId are required")
        start_time = _to_utc(start_time)

        booking = Booking.new(user_id, barber_id, start_time, service_type, notes)
        self._availability.ensure_available(barber_id, booking.start_time, booking.end_time)

        created = self._repository.create(booking)
        self._logger.info(
            "Booking created",
            extra={
                "booking_id": created.id,
                "user_id": user_id,
                "barber_id": barber_id,
                "start_time": start_time.isoformat(),
            },
        )
        return created

    def get(self, booking_id: str) -> Booking:
        booking = self._repository.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def update(self, booking_id: str, patch: BookingPatch) -> Booking:
        """
        Partial update. Start time and service type changes recompute end_time and
        re-run the conflict check against every other booking of the barber; notes
        are applied as given. Nothing is written if any check fails.
        """
        existing = self.get(booking_id)

        start_time: datetime | None = None
        end_time: datetime | None = None

        if patch.start_time is not None:
            service_type = patch.service_type or existing.service_type
            start_time = _to_utc(patch.start_time)
            end_time = calculate_end_time(start_time, service_type)
            self._availability.ensure_available(
                existing.barber_id,
                start_time,
                end_time,
                exclude_booking_id=existing.id,
            )
        elif patch.service_type is not None:
            end_time = calculate_end_time(existing.start_time, patch.service_type)
            self._availability.ensure_available(
                existing.barber_id,
                existing.start_time,
                end_time,
                exclude_booking_id=existing.id,
                message="barber is not available for the requested service duration",
            )

        updated = self._repository.update_partial(
            booking_id,
            BookingUpdate(
                start_time=start_time,
                end_time=end_time,
                service_type=patch.service_type,
                notes=patch.notes,
            ),
        )
        if updated is None:
            raise BookingNotFoundError(booking_id)

        self._logger.info("Booking updated", extra={"booking_id": booking_id})
        return updated

    def cancel(self, booking_id: str) -> bool:
        changed = self._repository.cancel(booking_id)
        if changed:
            self._logger.info("Booking cancelled", extra={"booking_id": booking_id})
        else:
            self._logger.info(
                "Booking not cancelled",
                extra={"booking_id": booking_id, "reason": "not found or already cancelled"},
            )
        return changed

    def list_for_user(self, user_id: str) -> list[Booking]:
        return self._repository.list_by_user(user_id)

    def list_for_barber(self, barber_id: str, day: date | None = None) -> list[Booking]:
        window = day_window(day, self._timezone) if day is not None else None
        return self._repository.list_by_barber(barber_id, window)

    def available_slots(self, barber_id: str, day: date) -> list[TimeSlot]:
        return self._availability.available_slots(barber_id, day)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInputError("start time must carry a UTC offset")
    return value.astimezone(timezone.utc)
