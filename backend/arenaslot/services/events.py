"""
backend/arenaslot/services/events.py

Event emitter: pushes booking events to a Redis queue for notification
consumers (admin dashboard, messaging workers).

Events are emitted only after the booking transaction has committed. A
failed push is logged and does not undo or fail the booking itself.
"""

import json
import time
import logging

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(redis: Redis | None, event_type: str, payload: dict) -> bool:
    """
    Emit a p2p event (instant delivery).

    Pushed to Redis list `events:p2p` for the consumer loop.
    Returns False when Redis is not configured or the push failed.
    """
    if redis is None:
        logger.debug(f"Redis not configured, event {event_type} not emitted")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(P2P_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False


def booking_payload(booking) -> dict:
    return {
        "booking_id": booking.id,
        "user_id": booking.user_id,
        "game_id": booking.game_id,
        "date": booking.booking_date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status,
    }
