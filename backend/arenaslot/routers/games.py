# backend/arenaslot/routers/games.py
# PATCH = ALLOWED (admin), DELETE = only while no booking refers to the game

from fastapi import APIRouter, Depends, Response, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.games import GameCreate, GameRead, GameUpdate
from ..services.booking_store import BookingStore
from ..services.errors import BookingError
from ..services.slots.invalidator import invalidate_game
from .deps import http_error, require_admin

router = APIRouter(prefix="/games", tags=["games"])


@router.get("/", response_model=list[GameRead])
def list_games(db: Session = Depends(get_db)):
    return BookingStore(db).list_games()


@router.get("/{id}", response_model=GameRead)
def get_game(id: int, db: Session = Depends(get_db)):
    try:
        return BookingStore(db).read_game(id)
    except BookingError as e:
        raise http_error(e)


@router.post(
    "/",
    response_model=GameRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_game(data: GameCreate, db: Session = Depends(get_db)):
    try:
        return BookingStore(db).insert_game(data.model_dump())
    except BookingError as e:
        raise http_error(e)


@router.patch("/{id}", response_model=GameRead, dependencies=[Depends(require_admin)])
def update_game(id: int, data: GameUpdate, db: Session = Depends(get_db)):
    # Free start times do not depend on catalog fields: the slot cache stays
    try:
        return BookingStore(db).update_game(id, data.model_dump(exclude_unset=True, exclude_none=True))
    except BookingError as e:
        raise http_error(e)


@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_game(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    try:
        BookingStore(db).delete_game(id)
    except BookingError as e:
        raise http_error(e)

    invalidate_game(redis, id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
