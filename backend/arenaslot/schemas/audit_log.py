from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class BookingAuditRead(BaseModel):
    id: int
    booking_id: int

    old_status: Optional[str] = None
    new_status: str
    changed_by: Optional[int] = None

    notes: Optional[str] = None
    changed_at: datetime

    model_config = {"from_attributes": True}
