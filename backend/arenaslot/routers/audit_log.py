from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.audit_log import BookingAuditRead
from ..services.booking_store import BookingStore
from .deps import require_admin


router = APIRouter(prefix="/audit", tags=["audit"], dependencies=[Depends(require_admin)])


@router.get("/", response_model=list[BookingAuditRead])
def list_audit(
    booking_id: Optional[int] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """
    Read-only booking status audit log.

    Filters:
    - booking_id
    - limit (default 50, max enforced by the store)
    """
    return BookingStore(db).list_audit(booking_id=booking_id, limit=limit)
