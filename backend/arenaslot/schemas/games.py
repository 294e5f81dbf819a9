# backend/arenaslot/schemas/games.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GameCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price_per_hour: float = Field(gt=0)
    max_players: int = Field(gt=0)

    model_config = {"from_attributes": True}


class GameUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price_per_hour: Optional[float] = Field(None, gt=0)
    max_players: Optional[int] = Field(None, gt=0)


class GameRead(BaseModel):
    id: int
    name: str
    description: str
    price_per_hour: float
    max_players: int

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
