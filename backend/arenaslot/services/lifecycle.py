"""
Booking lifecycle: statuses, actors and the allowed transition table.

    user  (own booking):  pending   → canceled
                          confirmed → canceled   (only before the cancellation deadline)
    admin (any booking):  pending   → confirmed | canceled
                          confirmed → completed | no_show | canceled

canceled, no_show and completed are terminal. Anything else is rejected
with InvalidTransition; nothing is silently ignored.
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from .errors import InvalidTransition
from .slots.config import SystemSettings, time_str_to_minutes


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    NO_SHOW = "no_show"
    COMPLETED = "completed"


class ActorRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: ActorRole = ActorRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset({
    BookingStatus.CANCELED, BookingStatus.NO_SHOW, BookingStatus.COMPLETED,
})

ADMIN_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELED}),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.COMPLETED, BookingStatus.NO_SHOW, BookingStatus.CANCELED,
    }),
}

USER_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CANCELED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELED}),
}

# Audit notes written on every status change
AUDIT_NOTES = {
    BookingStatus.CANCELED: "Booking canceled - slot freed",
    BookingStatus.NO_SHOW: "Marked as no-show - slot freed",
    BookingStatus.COMPLETED: "Booking completed",
}


def initial_status(settings: SystemSettings) -> BookingStatus:
    """Status of a freshly created booking."""
    if settings.require_admin_approval:
        return BookingStatus.PENDING
    return BookingStatus.CONFIRMED


def booking_start_datetime(booking_date: date, start_time: str) -> datetime:
    return datetime.combine(booking_date, datetime.min.time()) + timedelta(
        minutes=time_str_to_minutes(start_time)
    )


def check_transition(
    booking: Any,
    new_status: BookingStatus,
    actor: Actor,
    settings: SystemSettings,
    now: datetime,
) -> None:
    """
    Raise InvalidTransition unless actor may move booking to new_status.

    booking needs status, user_id, booking_date and start_time.
    """
    current = BookingStatus(booking.status)
    new_status = BookingStatus(new_status)

    if current in TERMINAL_STATUSES:
        raise InvalidTransition(current.value, new_status.value, "booking is already closed")

    if actor.is_admin:
        if new_status not in ADMIN_TRANSITIONS.get(current, frozenset()):
            raise InvalidTransition(current.value, new_status.value)
        return

    if booking.user_id != actor.user_id:
        raise InvalidTransition(current.value, new_status.value, "not your booking")

    if new_status not in USER_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(current.value, new_status.value)

    if current == BookingStatus.CONFIRMED and _past_deadline(booking, settings, now):
        raise InvalidTransition(
            current.value,
            new_status.value,
            f"cancellation is only possible more than {settings.cancellation_deadline} hours before start",
        )


def check_reschedule(
    booking: Any,
    actor: Actor,
    settings: SystemSettings,
    now: datetime,
) -> None:
    """
    Raise InvalidTransition unless actor may move booking to another interval.

    Users are held to the cancellation deadline of the booking's current
    start: moving a confirmed booking gives up its slot just like canceling.
    """
    current = BookingStatus(booking.status)

    if current not in ACTIVE_STATUSES:
        raise InvalidTransition(current.value, current.value, "only active bookings can be rescheduled")

    if actor.is_admin:
        return

    if booking.user_id != actor.user_id:
        raise InvalidTransition(current.value, current.value, "not your booking")

    if current == BookingStatus.CONFIRMED and _past_deadline(booking, settings, now):
        raise InvalidTransition(
            current.value,
            current.value,
            f"rescheduling is only possible more than {settings.cancellation_deadline} hours before start",
        )


def _past_deadline(booking: Any, settings: SystemSettings, now: datetime) -> bool:
    starts_at = booking_start_datetime(booking.booking_date, booking.start_time)
    return starts_at - now <= timedelta(hours=float(settings.cancellation_deadline))


def audit_note(new_status: BookingStatus) -> str:
    return AUDIT_NOTES.get(BookingStatus(new_status), "Status updated")
