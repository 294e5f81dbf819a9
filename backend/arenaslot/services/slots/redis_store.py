# backend/arenaslot/services/slots/redis_store.py
"""
Redis cache of free start times using Sorted Sets.

Key format: slots:day:{game_id}:{date}
Value: Sorted Set where member = "HH:MM", score = start timestamp
       (unix time at which the start time is in the past).

Query: ZRANGEBYSCORE key {now_ts} +inf → only start times still ahead.
Sentinel: "__empty__" with score=0 marks "calculated, nothing free".

The cache only serves the read side (/slots/day). Booking writes always
re-check overlaps inside the locked transaction.
"""

from datetime import date, datetime
from redis import Redis


EMPTY_SENTINEL = "__empty__"
DEFAULT_TTL_SECONDS = 3600


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for free start times."""

    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, game_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{game_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        game_id: int,
        dt: date,
        slots: list[tuple[str, float]],
    ) -> None:
        """
        Store free start times for a day.

        Args:
            game_id: Game ID
            dt: Target date
            slots: List of (time_str, start_ts) pairs.
                   Empty list → sentinel is stored.
        """
        key = self._key(game_id, dt)
        pipe = self.redis.pipeline()

        # Remove old data
        pipe.delete(key)

        if slots:
            pipe.zadd(key, {time_str: start_ts for time_str, start_ts in slots})
        else:
            # Empty day: sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: 0})
        pipe.expire(key, self.ttl_seconds)

        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_available_slots(
        self,
        game_id: int,
        dt: date,
        now: datetime,
    ) -> list[str] | None:
        """
        Get free start times that are not yet in the past.

        Returns:
            Sorted list of "HH:MM" strings, or None on cache miss.
        """
        key = self._key(game_id, dt)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrangebyscore(key, now.timestamp(), "+inf")
        return [m for m in map(_decode, members) if m != EMPTY_SENTINEL]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(
        self,
        game_id: int | None = None,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached days.

        Args:
            game_id: Game ID, or None for every game (settings changed).
            dates: Specific dates, or None for all cached dates.

        Returns:
            Number of deleted keys.
        """
        if game_id is not None and dates:
            keys = [self._key(game_id, dt) for dt in dates]
        else:
            scope = "*" if game_id is None else str(game_id)
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{scope}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)
