# backend/arenaslot/routers/bookings.py
# Status changes go through POST /bookings/{id}/status; PATCH = 405, DELETE = 405

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingInterval,
    BookingQuoteRead,
    BookingRead,
    BookingReschedule,
    BookingStatsRead,
    BookingStatusUpdate,
)
from ..services import booking_service
from ..services.booking_store import BookingStore
from ..services.errors import BookingError, NotFoundError
from ..services.lifecycle import Actor, BookingStatus
from .deps import get_actor, http_error, require_admin

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    game_id: Optional[int] = None,
    user_id: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Admins see every booking (newest first); users only their own."""
    if not actor.is_admin:
        user_id = actor.user_id
    return BookingStore(db).list_bookings(
        user_id=user_id,
        game_id=game_id,
        status=status_filter,
        newest_first=True,
    )


@router.get("/upcoming", response_model=list[BookingRead])
def list_upcoming(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return booking_service.upcoming_bookings(db, actor.user_id)


@router.get("/history", response_model=list[BookingRead])
def list_history(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return booking_service.booking_history(db, actor.user_id)


@router.get("/stats", response_model=BookingStatsRead, dependencies=[Depends(require_admin)])
def get_stats(game_id: Optional[int] = None, db: Session = Depends(get_db)):
    return BookingStore(db).booking_stats(game_id)


@router.post("/quote", response_model=BookingQuoteRead)
def quote_booking(data: BookingInterval, db: Session = Depends(get_db)):
    """Validate and price a selection without booking it."""
    try:
        return booking_service.quote_booking(
            db, data.game_id, data.booking_date, data.start_time, data.end_time
        )
    except BookingError as e:
        raise http_error(e)


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    try:
        return booking_service.create_booking(
            db,
            user_id=actor.user_id,
            game_id=data.game_id,
            booking_date=data.booking_date,
            start_time=data.start_time,
            end_time=data.end_time,
            notes=data.notes,
            redis=redis,
        )
    except BookingError as e:
        raise http_error(e)


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    try:
        booking = BookingStore(db).read_booking(id)
        if not actor.is_admin and booking.user_id != actor.user_id:
            raise NotFoundError("Booking", id)
        return booking
    except BookingError as e:
        raise http_error(e)


@router.post("/{id}/status", response_model=BookingRead)
def update_booking_status(
    id: int,
    data: BookingStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    try:
        return booking_service.change_status(
            db, id, data.status, actor, notes=data.notes, redis=redis
        )
    except BookingError as e:
        raise http_error(e)


@router.post("/{id}/reschedule", response_model=BookingRead)
def reschedule_booking(
    id: int,
    data: BookingReschedule,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    try:
        return booking_service.reschedule_booking(
            db, id, actor, data.booking_date, data.start_time, data.end_time, redis=redis
        )
    except BookingError as e:
        raise http_error(e)


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
