# backend/arenaslot/services/pricing.py
"""
Booking price calculation.

total_cost = price_per_hour × duration in hours, rounded half-up to a whole
currency unit. Computed once when a booking is created (or rescheduled) and
stored on the row; never recomputed on read.
"""

from decimal import Decimal, ROUND_HALF_UP

from .slots.calculator import booking_duration_minutes


def calculate_cost(
    price_per_hour: float | Decimal,
    start_time: str,
    end_time: str,
    is_24_7: bool,
) -> int:
    """
    Price of [start_time, end_time) for a game.

    Examples:
        500/h, 14:00–15:30          → 750
        100/h, 23:00–05:00 (24/7)   → 600

    A zero or negative duration (non-24/7 end <= start) costs 0; callers
    must reject such a selection rather than book it for free.
    """
    minutes = booking_duration_minutes(start_time, end_time, is_24_7)
    if minutes <= 0:
        return 0

    amount = Decimal(str(price_per_hour)) * minutes / 60
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
