"""
Booking conflict detection.

Overlap formula:  (candidate_start < existing_end) AND (existing_start < candidate_end)
Strict inequality: a booking ending at 10:00 and one starting at 10:00 do not conflict.

Only active bookings (pending, confirmed) occupy a slot. Intervals are placed
on a minute axis anchored at the candidate's date: an overnight booking's
end is pushed past 24:00, and bookings dated the day before / after are
shifted by -1440 / +1440 minutes. For same-day, non-overnight intervals this
is the same as comparing the zero-padded "HH:MM" strings.
"""

from datetime import date
from typing import Any, Iterable

from .lifecycle import ACTIVE_STATUSES, BookingStatus
from .slots.config import MINUTES_PER_DAY, time_str_to_minutes


def _span(day: date, start_time: str, end_time: str, anchor: date) -> tuple[int, int]:
    start_min = time_str_to_minutes(start_time)
    end_min = time_str_to_minutes(end_time)
    if end_min < start_min:
        end_min += MINUTES_PER_DAY
    offset = (day - anchor).days * MINUTES_PER_DAY
    return start_min + offset, end_min + offset


def find_conflicts(
    game_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    active_bookings: Iterable[Any],
    exclude_booking_id: int | None = None,
) -> list[Any]:
    """Return the active bookings of game_id that overlap the candidate."""
    cand_start, cand_end = _span(booking_date, start_time, end_time, booking_date)
    conflicts = []
    for booking in active_bookings:
        if booking.game_id != game_id:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if BookingStatus(booking.status) not in ACTIVE_STATUSES:
            continue
        start, end = _span(booking.booking_date, booking.start_time, booking.end_time, booking_date)
        if cand_start < end and start < cand_end:
            conflicts.append(booking)
    return conflicts


def has_conflict(
    game_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    active_bookings: Iterable[Any],
    exclude_booking_id: int | None = None,
) -> bool:
    """True if [start_time, end_time) overlaps any active booking of the game."""
    return bool(find_conflicts(
        game_id, booking_date, start_time, end_time, active_bookings, exclude_booking_id
    ))
