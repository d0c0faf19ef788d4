class BookingError(RuntimeError):
    """Base class for errors raised by the booking core and its adapters."""
    pass


class BookingNotFoundError(BookingError):
    """Raised when a booking id does not resolve to a stored booking."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"booking not found: {booking_id}")
        self.booking_id = booking_id


class SchedulingConflictError(BookingError):
    """Raised when the requested interval overlaps a non-cancelled booking of the same barber."""

    def __init__(self, message: str, conflicting_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicting_ids = list(conflicting_ids or [])


class InvalidInputError(BookingError, ValueError):
    """Raised for malformed timestamps, dates or enum values."""
    pass


class PersistenceError(BookingError):
    """Raised when the document store is unreachable or an operation on it fails."""
    pass


class AuthenticationError(BookingError):
    """Raised when the bearer token is missing, malformed, expired or wrongly signed."""
    pass


class PermissionDeniedError(BookingError):
    """Raised when an authenticated caller acts on data they do not own."""
    pass
