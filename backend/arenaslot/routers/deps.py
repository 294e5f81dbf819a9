# backend/arenaslot/routers/deps.py
"""
Shared router dependencies.

Identity comes from the gateway, which authenticates the caller and
forwards X-User-Id / X-User-Role. This service does not authenticate.
"""

from fastapi import Depends, Header, HTTPException, status

from ..services.errors import (
    BookingError,
    ConflictError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from ..services.lifecycle import Actor, ActorRole


def get_actor(
    x_user_id: int | None = Header(None),
    x_user_role: str = Header("user"),
) -> Actor:
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header required",
        )
    try:
        role = ActorRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role: {x_user_role}",
        )
    return Actor(user_id=x_user_id, role=role)


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return actor


def http_error(exc: BookingError) -> HTTPException:
    """Map a domain error to the HTTP response the client sees."""
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": exc.errors},
        )
    if isinstance(exc, ConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "conflicting_ids": exc.conflicting_ids},
        )
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
