"""
Booking domain errors.

All of them are recoverable: routers turn them into 4xx responses and the
caller decides what to do next. Storage failures are not wrapped here and
propagate as SQLAlchemy errors.
"""


class BookingError(Exception):
    """Base class for booking domain errors."""


class ValidationError(BookingError):
    """One or more field rules violated. Nothing was written."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConflictError(BookingError):
    """Candidate interval overlaps an active booking of the same game."""

    def __init__(self, message: str = "Time slot is already booked", conflicting_ids: list[int] | None = None):
        self.conflicting_ids = conflicting_ids or []
        super().__init__(message)


class InvalidTransition(BookingError):
    """Status change not permitted for this actor and current status."""

    def __init__(self, current: str, requested: str, reason: str | None = None):
        self.current = current
        self.requested = requested
        message = f"Cannot change booking status from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFoundError(BookingError):
    """Referenced game, booking or settings row does not exist."""

    def __init__(self, entity: str, key=None):
        self.entity = entity
        self.key = key
        message = f"{entity} not found" if key is None else f"{entity} {key} not found"
        super().__init__(message)
