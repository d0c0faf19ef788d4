from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from booking_service.domain.entities.booking import Booking
from booking_service.domain.entities.booking_patch import BookingUpdate


class BookingRepositoryPort(ABC):
    @abstractmethod
    def create(self, booking: Booking) -> Booking:
        """Persist a new booking. Returns it with id, created_at and updated_at set."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def update_partial(self, booking_id: str, update: BookingUpdate) -> Booking | None:
        """
        Apply the non-None fields of ``update`` and refresh updated_at.
        Returns the stored booking after the update, or None if it does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel(self, booking_id: str) -> bool:
        """
        Mark a booking cancelled.
        Returns False when the booking is missing or already cancelled.
        """
        raise NotImplementedError

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Booking]:
        """All bookings of a user regardless of status, in creation order."""
        raise NotImplementedError

    @abstractmethod
    def list_by_barber(
        self,
        barber_id: str,
        window: tuple[datetime, datetime] | None = None,
    ) -> list[Booking]:
        """
        Bookings of a barber in creation order.
        With ``window``, only bookings whose start_time falls in [window_start, window_end).
        """
        raise NotImplementedError

    @abstractmethod
    def list_overlapping(self, barber_id: str, start: datetime, end: datetime) -> list[Booking]:
        """
        Non-cancelled bookings of a barber intersecting [start, end).

        A booking matches when any of these holds:
        - its start_time falls in [start, end)
        - its end_time falls in (start, end]
        - it spans the whole window (start_time <= start and end_time >= end)

        A single range filter on start_time is not enough: it misses bookings that
        begin before the window and end inside it, or that cover it entirely.
        """
        raise NotImplementedError
