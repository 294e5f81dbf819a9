# backend/arenaslot/schemas/bookings.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.lifecycle import BookingStatus

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(v: str) -> str:
    if not TIME_RE.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


class BookingInterval(BaseModel):
    game_id: int
    booking_date: date
    start_time: str = Field(description="Time in HH:MM format")
    end_time: str = Field(description="Time in HH:MM format, exclusive")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)


class BookingCreate(BookingInterval):
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingQuoteRead(BaseModel):
    game_id: int
    booking_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    total_cost: int
    status: BookingStatus

    model_config = {"from_attributes": True}


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: Optional[str] = None


class BookingReschedule(BaseModel):
    booking_date: date
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)


class BookingRead(BaseModel):
    id: int

    user_id: int
    game_id: int

    booking_date: date
    start_time: str
    end_time: str

    status: BookingStatus
    total_cost: int
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingStatsRead(BaseModel):
    total_bookings: int
    by_status: dict[str, int]
    total_revenue: int
