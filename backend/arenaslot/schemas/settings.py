# backend/arenaslot/schemas/settings.py

from typing import Optional
from pydantic import BaseModel


class SystemSettingsUpdate(BaseModel):
    """Partial update; absent fields keep their current value."""
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    is_24_7: Optional[bool] = None
    advance_booking_days: Optional[int] = None
    booking_slot_duration: Optional[int] = None
    min_booking_duration: Optional[float] = None
    max_booking_duration: Optional[float] = None
    cancellation_deadline: Optional[float] = None
    require_admin_approval: Optional[bool] = None

    model_config = {"from_attributes": True}


class SystemSettingsRead(BaseModel):
    opening_time: str
    closing_time: str
    is_24_7: bool
    advance_booking_days: int
    booking_slot_duration: int
    min_booking_duration: float
    max_booking_duration: float
    cancellation_deadline: float
    require_admin_approval: bool

    model_config = {"from_attributes": True}


class SettingsValidationRead(BaseModel):
    is_valid: bool
    errors: list[str]

    model_config = {"from_attributes": True}
