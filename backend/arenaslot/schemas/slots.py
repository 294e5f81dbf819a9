# backend/arenaslot/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from pydantic import BaseModel, Field


class SlotsDayResponse(BaseModel):
    """Free start times of a game for a day (Level 1)."""
    game_id: int
    date: date
    slot_duration_minutes: int = Field(description="Grid step in minutes (15/30/60)")
    min_booking_duration: float
    max_booking_duration: float
    available_times: list[str]

    model_config = {"from_attributes": True}


class EndTimeOption(BaseModel):
    """One bookable end time for a chosen start."""
    end_time: str  # "HH:MM"; earlier than start_time for overnight bookings
    duration_minutes: int
    cost: int

    model_config = {"from_attributes": True}


class SlotsEndTimesResponse(BaseModel):
    """Free end times for a start time (Level 2)."""
    game_id: int
    date: date
    start_time: str
    options: list[EndTimeOption]

    model_config = {"from_attributes": True}
