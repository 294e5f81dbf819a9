# backend/arenaslot/services/slots/invalidator.py
"""
Cache invalidation for free start times.

Triggers:
✓ Booking created / rescheduled / status changed → that game, the booking
  date and its neighbours (overnight bookings reach into the next day)
✓ System settings written → every cached day of every game
✓ Game deleted → every cached day of that game

Redis errors are logged: a stale entry only affects what /slots/day shows,
never what can be booked.
"""

import logging
from datetime import date, timedelta

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def get_affected_dates(booking_date: date) -> list[date]:
    """booking_date with the day before and the day after."""
    return [booking_date + timedelta(days=offset) for offset in (-1, 0, 1)]


def invalidate_game_dates(
    redis: Redis | None,
    game_id: int,
    booking_dates: list[date],
) -> int:
    """Drop cached days of one game around each of booking_dates."""
    if redis is None:
        return 0

    dates = sorted({d for bd in booking_dates for d in get_affected_dates(bd)})
    try:
        return SlotsRedisStore(redis).delete_day_slots(game_id, dates)
    except RedisError as e:
        logger.error(f"Slots cache invalidation failed for game={game_id}: {e}")
        return 0


def invalidate_game(redis: Redis | None, game_id: int) -> int:
    """Drop every cached day of one game (game deleted)."""
    if redis is None:
        return 0

    try:
        return SlotsRedisStore(redis).delete_day_slots(game_id)
    except RedisError as e:
        logger.error(f"Slots cache invalidation failed for game={game_id}: {e}")
        return 0


def invalidate_all(redis: Redis | None) -> int:
    """Drop every cached day (settings changed)."""
    if redis is None:
        return 0

    try:
        return SlotsRedisStore(redis).delete_day_slots()
    except RedisError as e:
        logger.error(f"Slots cache invalidation failed: {e}")
        return 0
