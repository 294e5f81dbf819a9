"""
Booking completion checker.

Periodically looks for confirmed bookings whose end time has passed and
emits booking_done events, so an admin can mark them completed or no_show.
Status is never changed here: those transitions stay with the admin.

Runs as an asyncio task in the app lifespan.
Uses synchronous DB and Redis (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import datetime, timedelta

from redis import Redis
from sqlalchemy.orm import Session, sessionmaker

from ..models.generated import Bookings
from .events import booking_payload, emit_event
from .lifecycle import BookingStatus
from .slots.calculator import booking_duration_minutes
from .slots.availability import start_datetime

logger = logging.getLogger(__name__)

SENT_KEY_TTL = 900  # 15 minutes, re-send until admin acts


def booking_end_datetime(booking) -> datetime:
    # Overnight bookings only exist under 24/7, so the wrap is always applied
    minutes = booking_duration_minutes(booking.start_time, booking.end_time, is_24_7=True)
    return start_datetime(booking.booking_date, booking.start_time) + timedelta(minutes=minutes)


def find_finished_bookings(db: Session, now: datetime) -> list[Bookings]:
    """
    Confirmed bookings (dated up to today) whose end is not after now.

    A row whose times cannot be read is logged and skipped.
    """
    candidates = (
        db.query(Bookings)
        .filter(
            Bookings.status == BookingStatus.CONFIRMED.value,
            Bookings.booking_date <= now.date(),
        )
        .all()
    )

    finished = []
    for booking in candidates:
        try:
            if booking_end_datetime(booking) <= now:
                finished.append(booking)
        except (ValueError, TypeError, AttributeError):
            logger.exception(f"Error processing booking {booking.id} for completion")
    return finished


async def completion_checker_loop(
    session_factory: sessionmaker,
    redis: Redis,
    interval: int = 60,
) -> None:
    """Periodic loop emitting booking_done for finished confirmed bookings."""
    logger.info("completion_checker_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_check_finished_bookings, session_factory, redis)
            except asyncio.CancelledError:
                logger.info("completion_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("completion_checker_loop error")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass


def _check_finished_bookings(session_factory: sessionmaker, redis: Redis) -> int:
    """Emit booking_done once per finished booking (synchronous). Returns events sent."""
    now = datetime.now()
    sent = 0

    db = session_factory()
    try:
        for booking in find_finished_bookings(db, now):
            try:
                if _process_single_booking(booking, redis):
                    sent += 1
            except Exception:
                logger.exception(f"Error processing booking {booking.id} for completion")
    finally:
        db.close()

    return sent


def _process_single_booking(booking: Bookings, redis: Redis) -> bool:
    """Emit booking_done for one finished booking unless already sent."""
    sent_key = f"bkdone:sent:{booking.id}"
    if redis.exists(sent_key):
        return False

    if not emit_event(redis, "booking_done", booking_payload(booking)):
        return False

    redis.setex(sent_key, SENT_KEY_TTL, "1")
    logger.info(
        f"booking_done emitted for booking={booking.id} "
        f"(ended at {booking_end_datetime(booking).strftime('%H:%M')})"
    )
    return True
