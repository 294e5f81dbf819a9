# backend/arenaslot/services/slots/calculator.py
"""
Slot generator.

Pure functions of SystemSettings:
  generate_candidate_start_times(settings)      → ["06:00", "06:30", ...]
  generate_legal_end_times(start, settings)     → end times within duration bounds

Overnight rule: under 24/7 operation an end time that is earlier than the
start time means "next day" (23:00–05:00 lasts 6 hours). Outside 24/7 such
an interval is invalid.
"""

from fractions import Fraction

from .config import (
    MINUTES_PER_DAY,
    SystemSettings,
    minutes_to_time_str,
    time_str_to_minutes,
)


def booking_duration_minutes(start_time: str, end_time: str, is_24_7: bool) -> int:
    """
    Length of [start, end) in minutes.

    Under 24/7, end < start wraps past midnight. Outside 24/7 the result
    is zero or negative for end <= start, which callers treat as invalid.
    A zero-length interval (start == end) is 0 in both modes.
    """
    start_min = time_str_to_minutes(start_time)
    end_min = time_str_to_minutes(end_time)
    if is_24_7 and end_min < start_min:
        end_min += MINUTES_PER_DAY
    return end_min - start_min


def _bound_minutes(hours: float) -> Fraction:
    return Fraction(str(hours)) * 60


def is_duration_allowed(minutes: int, settings: SystemSettings) -> bool:
    """Inclusive [min_booking_duration, max_booking_duration] check."""
    if minutes <= 0:
        return False
    return (
        _bound_minutes(settings.min_booking_duration)
        <= minutes
        <= _bound_minutes(settings.max_booking_duration)
    )


def generate_candidate_start_times(settings: SystemSettings) -> list[str]:
    """
    Ordered start times of the operating day.

    From the opening minute (00:00 under 24/7) in booking_slot_duration
    steps up to, not including, the closing minute (24:00 under 24/7).
    """
    step = settings.booking_slot_duration
    return [
        minutes_to_time_str(t)
        for t in range(settings.opening_minute, settings.closing_minute, step)
    ]


def generate_legal_end_times(start_time: str, settings: SystemSettings) -> list[str]:
    """
    Ordered end times for start_time whose duration is within bounds.

    Ends lie on the start + k * step grid. Outside 24/7 they may not pass
    closing time; under 24/7 they may run into the next day (then the
    returned "HH:MM" is earlier than start_time).
    """
    step = settings.booking_slot_duration
    start_min = time_str_to_minutes(start_time)

    if settings.is_24_7:
        limit = start_min + MINUTES_PER_DAY - 1
    else:
        if not settings.opening_minute <= start_min < settings.closing_minute:
            return []
        limit = settings.closing_minute

    ends = []
    t = start_min + step
    while t <= limit:
        length = t - start_min
        if length > _bound_minutes(settings.max_booking_duration):
            break
        if is_duration_allowed(length, settings):
            ends.append(minutes_to_time_str(t))
        t += step
    return ends
