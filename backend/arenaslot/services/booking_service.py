# backend/arenaslot/services/booking_service.py
"""
Booking use cases.

create_booking:
  1. Read settings snapshot and game
  2. Validate the selection (date window, past start, start/end on the grid
     and within duration bounds)
  3. Price it
  4. Atomic conflict re-check + insert (BookingStore.insert_booking)
  5. After commit: invalidate cached free slots, emit booking_created

A rejected request is never retried here; the caller picks a new interval.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from redis import Redis
from sqlalchemy.orm import Session

from ..models.generated import Bookings as DBBookings
from .booking_store import BookingStore
from .errors import NotFoundError, ValidationError
from .events import booking_payload, emit_event
from .lifecycle import Actor, BookingStatus, initial_status
from .pricing import calculate_cost
from .slots.availability import is_date_bookable, start_datetime
from .slots.calculator import (
    booking_duration_minutes,
    generate_candidate_start_times,
    generate_legal_end_times,
)
from .slots.config import DEFAULT_SETTINGS, SystemSettings, time_str_to_minutes
from .slots.invalidator import invalidate_all, invalidate_game_dates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingQuote:
    game_id: int
    booking_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    total_cost: int
    status: BookingStatus


# ── Settings ─────────────────────────────────────────────────────────────


def get_settings(db: Session) -> SystemSettings:
    """Settings snapshot; defaults when the row has never been written."""
    try:
        return BookingStore(db).read_settings()
    except NotFoundError:
        return DEFAULT_SETTINGS


def update_settings(
    db: Session,
    patch: Mapping[str, Any],
    redis: Redis | None = None,
) -> SystemSettings:
    settings = BookingStore(db).write_settings(patch)
    invalidate_all(redis)
    return settings


def reset_settings(db: Session, redis: Redis | None = None) -> SystemSettings:
    return update_settings(db, DEFAULT_SETTINGS.to_dict(), redis)


# ── Selection checks ─────────────────────────────────────────────────────


def validate_selection(
    settings: SystemSettings,
    booking_date: date,
    start_time: str,
    end_time: str,
    now: datetime,
) -> list[str]:
    """Every reason the interval cannot be booked (empty list = bookable)."""
    errors = []

    try:
        time_str_to_minutes(start_time)
        time_str_to_minutes(end_time)
    except (ValueError, AttributeError):
        return ["Start and end time must be in HH:MM format"]

    if not is_date_bookable(booking_date, settings, now.date()):
        errors.append(
            f"Booking date must be between today and {settings.advance_booking_days} days ahead"
        )
    elif start_datetime(booking_date, start_time) < now:
        errors.append("Start time is in the past")

    if start_time not in generate_candidate_start_times(settings):
        errors.append("Start time is outside operating hours or not on the slot grid")
    elif end_time not in generate_legal_end_times(start_time, settings):
        if booking_duration_minutes(start_time, end_time, settings.is_24_7) <= 0:
            errors.append("End time must be after start time")
        else:
            errors.append(
                f"Duration must be between {settings.min_booking_duration} and "
                f"{settings.max_booking_duration} hours and end within operating hours"
            )

    return errors


def quote_booking(
    db: Session,
    game_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    settings: SystemSettings | None = None,
    now: datetime | None = None,
) -> BookingQuote:
    """Validate and price a selection without writing anything."""
    settings = settings or get_settings(db)
    now = now or datetime.now()
    game = BookingStore(db).read_game(game_id)

    errors = validate_selection(settings, booking_date, start_time, end_time, now)
    if errors:
        raise ValidationError(errors)

    return BookingQuote(
        game_id=game.id,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=booking_duration_minutes(start_time, end_time, settings.is_24_7),
        total_cost=calculate_cost(game.price_per_hour, start_time, end_time, settings.is_24_7),
        status=initial_status(settings),
    )


# ── Writes ───────────────────────────────────────────────────────────────


def create_booking(
    db: Session,
    user_id: int,
    game_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    notes: str | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> DBBookings:
    """
    Create a booking, or raise ValidationError / NotFoundError / ConflictError.

    Initial status is pending when admin approval is required, confirmed otherwise.
    """
    settings = get_settings(db)
    quote = quote_booking(db, game_id, booking_date, start_time, end_time, settings, now)

    booking = BookingStore(db).insert_booking({
        "user_id": user_id,
        "game_id": game_id,
        "booking_date": booking_date,
        "start_time": start_time,
        "end_time": end_time,
        "status": quote.status.value,
        "total_cost": quote.total_cost,
        "notes": notes,
    })

    invalidate_game_dates(redis, game_id, [booking_date])
    emit_event(redis, "booking_created", {**booking_payload(booking), "total_cost": booking.total_cost})
    return booking


def change_status(
    db: Session,
    booking_id: int,
    new_status: BookingStatus,
    actor: Actor,
    notes: str | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> DBBookings:
    """Apply a lifecycle transition for actor (InvalidTransition / NotFoundError)."""
    settings = get_settings(db)
    now = now or datetime.now()

    store = BookingStore(db)
    old_status = store.read_booking(booking_id).status
    booking = store.update_booking_status(booking_id, new_status, actor, settings, now, notes)

    invalidate_game_dates(redis, booking.game_id, [booking.booking_date])
    emit_event(redis, "booking_status_changed", {
        **booking_payload(booking),
        "old_status": old_status,
        "changed_by": actor.user_id,
    })
    return booking


def reschedule_booking(
    db: Session,
    booking_id: int,
    actor: Actor,
    booking_date: date,
    start_time: str,
    end_time: str,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> DBBookings:
    """Move an active booking to a new interval of the same game."""
    settings = get_settings(db)
    now = now or datetime.now()

    store = BookingStore(db)
    current = store.read_booking(booking_id)
    old_date = current.booking_date
    quote = quote_booking(db, current.game_id, booking_date, start_time, end_time, settings, now)

    booking = store.reschedule_booking(
        booking_id, actor, booking_date, start_time, end_time, quote.total_cost,
        settings, now,
    )

    invalidate_game_dates(redis, booking.game_id, [old_date, booking_date])
    emit_event(redis, "booking_rescheduled", {
        **booking_payload(booking),
        "previous_date": old_date.isoformat(),
        "total_cost": booking.total_cost,
    })
    return booking


# ── Reads ────────────────────────────────────────────────────────────────


def upcoming_bookings(db: Session, user_id: int, today: date | None = None, limit: int = 5) -> list[DBBookings]:
    """Active bookings of a user from today on, soonest first."""
    return BookingStore(db).list_bookings(
        user_id=user_id,
        date_from=today or date.today(),
        active_only=True,
        limit=limit,
    )


def booking_history(db: Session, user_id: int, today: date | None = None) -> list[DBBookings]:
    """Bookings of a user before today, latest first."""
    today = today or date.today()
    return BookingStore(db).list_bookings(
        user_id=user_id,
        date_to=date.fromordinal(today.toordinal() - 1),
        newest_first=True,
    )
