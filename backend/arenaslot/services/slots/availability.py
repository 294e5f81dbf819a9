# backend/arenaslot/services/slots/availability.py
"""
Free slots of a game on a given day.

Level 1: free start times (cached in Redis Sorted Sets)
  A candidate start time is free when at least one legal end time gives
  an interval that does not overlap an active booking.

Level 2: free end times for a chosen start (calculated on-the-fly)
  Legal end times in increasing order, cut at the first one that would
  overlap (every longer interval overlaps as well), each with its price.
"""

from datetime import date, datetime, timedelta

from redis import Redis
from sqlalchemy.orm import Session

from ..booking_store import BookingStore
from ..conflicts import has_conflict
from ..pricing import calculate_cost
from .calculator import (
    booking_duration_minutes,
    generate_candidate_start_times,
    generate_legal_end_times,
)
from .config import SystemSettings, time_str_to_minutes
from .redis_store import DEFAULT_TTL_SECONDS, SlotsRedisStore


def is_date_bookable(target_date: date, settings: SystemSettings, today: date) -> bool:
    """today <= target_date <= today + advance_booking_days."""
    return today <= target_date <= today + timedelta(days=settings.advance_booking_days)


def start_datetime(target_date: date, start_time: str) -> datetime:
    return datetime.combine(target_date, datetime.min.time()) + timedelta(
        minutes=time_str_to_minutes(start_time)
    )


def free_end_times(
    game_id: int,
    target_date: date,
    start_time: str,
    settings: SystemSettings,
    active_bookings: list,
    exclude_booking_id: int | None = None,
) -> list[str]:
    """Legal end times for start_time that keep the interval conflict-free."""
    ends = []
    for end_time in generate_legal_end_times(start_time, settings):
        if has_conflict(
            game_id, target_date, start_time, end_time, active_bookings, exclude_booking_id
        ):
            break
        ends.append(end_time)
    return ends


def free_start_times(
    game_id: int,
    target_date: date,
    settings: SystemSettings,
    active_bookings: list,
) -> list[str]:
    """Candidate start times that have at least one free end time."""
    return [
        start_time
        for start_time in generate_candidate_start_times(settings)
        if free_end_times(game_id, target_date, start_time, settings, active_bookings)
    ]


def calculate_game_availability(
    db: Session,
    game_id: int,
    target_date: date,
    settings: SystemSettings,
    redis: Redis | None = None,
    now: datetime | None = None,
    cache_ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> dict:
    """
    Free start times of a game on target_date (Level 1).

    Returns:
        Dict for SlotsDayResponse. Dates outside the advance booking
        window have no free times; start times already past are dropped.
    """
    now = now or datetime.now()
    store = BookingStore(db)
    store.read_game(game_id)

    result = {
        "game_id": game_id,
        "date": target_date.isoformat(),
        "slot_duration_minutes": settings.booking_slot_duration,
        "min_booking_duration": settings.min_booking_duration,
        "max_booking_duration": settings.max_booking_duration,
        "available_times": [],
    }
    if not is_date_bookable(target_date, settings, now.date()):
        return result

    result["available_times"] = _get_free_times(
        store, game_id, target_date, settings, now, redis, cache_ttl_seconds
    )
    return result


def calculate_end_times(
    db: Session,
    game_id: int,
    target_date: date,
    start_time: str,
    settings: SystemSettings,
    now: datetime | None = None,
) -> dict:
    """
    Free end times with duration and price for one start time (Level 2).

    Starts that create_booking would refuse get no options: dates outside
    the advance window, times off the grid and times already past.
    """
    now = now or datetime.now()
    store = BookingStore(db)
    game = store.read_game(game_id)

    result = {
        "game_id": game_id,
        "date": target_date.isoformat(),
        "start_time": start_time,
        "options": [],
    }
    if not is_date_bookable(target_date, settings, now.date()):
        return result
    if start_time not in generate_candidate_start_times(settings):
        return result
    if start_datetime(target_date, start_time) < now:
        return result

    active = store.read_active_bookings(game_id, target_date)
    for end_time in free_end_times(game_id, target_date, start_time, settings, active):
        result["options"].append({
            "end_time": end_time,
            "duration_minutes": booking_duration_minutes(start_time, end_time, settings.is_24_7),
            "cost": calculate_cost(game.price_per_hour, start_time, end_time, settings.is_24_7),
        })
    return result


# ── Level 1 with cache ───────────────────────────────────────────────────


def _get_free_times(
    store: BookingStore,
    game_id: int,
    target_date: date,
    settings: SystemSettings,
    now: datetime,
    redis: Redis | None,
    cache_ttl_seconds: int,
) -> list[str]:
    """Free start times still ahead of now, using Redis cache when available."""
    if redis is not None:
        cache = SlotsRedisStore(redis, cache_ttl_seconds)
        cached = cache.get_available_slots(game_id, target_date, now)
        if cached is not None:
            return cached

    active = store.read_active_bookings(game_id, target_date)
    slots = [
        (time_str, start_datetime(target_date, time_str).timestamp())
        for time_str in free_start_times(game_id, target_date, settings, active)
    ]

    if redis is not None:
        # Cache miss: store the whole day, past times are filtered on read
        cache.store_day_slots(game_id, target_date, slots)

    now_ts = now.timestamp()
    return [time_str for time_str, start_ts in slots if start_ts >= now_ts]
