# backend/arenaslot/routers/slots.py
"""
Slots API endpoints.

Level 1: GET /slots/day       - Free start times of a game for a day
Level 2: GET /slots/end-times - Free end times (with price) for a start time
"""

from datetime import date
from fastapi import APIRouter, Depends, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings as app_settings
from ..database import get_db
from ..redis_client import get_redis
from ..schemas.slots import SlotsDayResponse, SlotsEndTimesResponse
from ..services.booking_service import get_settings
from ..services.errors import BookingError
from ..services.slots.availability import calculate_end_times, calculate_game_availability
from .deps import http_error


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    game_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Free start times of a game on a day (Level 1)."""
    try:
        result = calculate_game_availability(
            db=db,
            game_id=game_id,
            target_date=target_date,
            settings=get_settings(db),
            redis=redis,
            cache_ttl_seconds=app_settings.slots_cache_ttl_seconds,
        )
    except BookingError as e:
        raise http_error(e)

    return SlotsDayResponse(**result)


@router.get("/end-times", response_model=SlotsEndTimesResponse)
def get_slots_end_times(
    game_id: int,
    start_time: str = Query(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$"),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Free end times for a chosen start time (Level 2)."""
    try:
        result = calculate_end_times(
            db=db,
            game_id=game_id,
            target_date=target_date,
            start_time=start_time,
            settings=get_settings(db),
        )
    except BookingError as e:
        raise http_error(e)

    return SlotsEndTimesResponse(**result)
