class BookingError(Exception):
    """Base error type for scheduling domain errors."""


class ValidationError(BookingError):
    """Raised when a required field is missing or malformed."""


class InvalidIdentifier(ValidationError):
    """Raised when a CPF fails the check-digit validation."""


class DuplicateBooking(BookingError):
    """Raised when the CPF already holds an active booking."""


class SlotUnavailable(BookingError):
    """Raised when the requested date/time is missing or already taken."""


class SlotsAlreadyGenerated(BookingError):
    """Raised when slots already exist for the date being generated."""


class StoreError(BookingError):
    """Raised when the underlying database fails."""
