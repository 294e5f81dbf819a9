# backend/arenaslot/routers/settings.py

from fastapi import APIRouter, Depends
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.settings import (
    SettingsValidationRead,
    SystemSettingsRead,
    SystemSettingsUpdate,
)
from ..services import booking_service
from ..services.errors import BookingError
from ..services.slots.config import validate_settings
from .deps import http_error, require_admin

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/", response_model=SystemSettingsRead)
def get_settings(db: Session = Depends(get_db)):
    return booking_service.get_settings(db)


@router.put("/", response_model=SystemSettingsRead, dependencies=[Depends(require_admin)])
def update_settings(
    data: SystemSettingsUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    try:
        return booking_service.update_settings(db, data.model_dump(exclude_unset=True), redis)
    except BookingError as e:
        raise http_error(e)


@router.post("/validate", response_model=SettingsValidationRead)
def validate_settings_patch(data: SystemSettingsUpdate):
    """Dry-run validation of a (partial) settings form; never writes."""
    return validate_settings(data.model_dump(exclude_none=True))


@router.post("/reset", response_model=SystemSettingsRead, dependencies=[Depends(require_admin)])
def reset_settings(
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    return booking_service.reset_settings(db, redis)
