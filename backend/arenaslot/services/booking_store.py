# backend/arenaslot/services/booking_store.py
"""
Persistence for settings, games and bookings.

Write paths that depend on the no-overlap invariant (insert, reschedule)
run the conflict check and the write inside one transaction that holds
a lock on the game row:

    Postgres / MySQL: SELECT ... FROM games WHERE id = :id FOR UPDATE
    SQLite:           every transaction is BEGIN IMMEDIATE (see database.py)

so of two racing requests for overlapping intervals the second one waits,
re-reads the first one's committed row and fails with ConflictError.
A partial unique index on (game_id, booking_date, start_time) over active
rows is a second line of defence; its IntegrityError maps to ConflictError.

Storage errors are rolled back and re-raised unchanged.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.generated import (
    BookingAuditLog as DBAuditLog,
    Bookings as DBBookings,
    Games as DBGames,
    SystemSettingsRow as DBSettings,
)
from .conflicts import find_conflicts
from .errors import ConflictError, NotFoundError, ValidationError
from .lifecycle import (
    ACTIVE_STATUSES,
    Actor,
    BookingStatus,
    audit_note,
    check_reschedule,
    check_transition,
)
from .slots.config import (
    DEFAULT_SETTINGS,
    SETTINGS_FIELDS,
    SystemSettings,
    merge_settings,
    validate_settings,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUS_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


def _settings_snapshot(row: DBSettings) -> SystemSettings:
    return SystemSettings(**{name: getattr(row, name) for name in SETTINGS_FIELDS})


class BookingStore:
    """Storage collaborator bound to one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ── Settings ─────────────────────────────────────────────────────────

    def read_settings(self) -> SystemSettings:
        """Current settings row as an immutable snapshot."""
        row = self.db.query(DBSettings).order_by(DBSettings.id).first()
        if not row:
            raise NotFoundError("Settings")
        return _settings_snapshot(row)

    def write_settings(self, patch: Mapping[str, Any]) -> SystemSettings:
        """
        Apply a partial update to the settings row (created if missing).

        The merged row is validated as a whole; on any violation nothing is
        written and ValidationError lists every broken rule.
        """
        try:
            row = (
                self.db.query(DBSettings)
                .order_by(DBSettings.id)
                .with_for_update()
                .first()
            )
            current = _settings_snapshot(row) if row else DEFAULT_SETTINGS
            merged = merge_settings(current, patch)

            validation = validate_settings(merged.to_dict())
            if not validation.is_valid:
                raise ValidationError(validation.errors)

            if row is None:
                row = DBSettings()
                self.db.add(row)
            for name, value in merged.to_dict().items():
                setattr(row, name, value)
            row.updated_at = func.now()

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"System settings updated: {sorted(k for k in patch if k in SETTINGS_FIELDS)}")
        return merged

    # ── Games ────────────────────────────────────────────────────────────

    def read_game(self, game_id: int) -> DBGames:
        game = self.db.get(DBGames, game_id)
        if not game:
            raise NotFoundError("Game", game_id)
        return game

    def list_games(self) -> list[DBGames]:
        return self.db.query(DBGames).order_by(DBGames.name).all()

    def insert_game(self, data: Mapping[str, Any]) -> DBGames:
        try:
            game = DBGames(**data)
            self.db.add(game)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError([f"Game {data.get('name')!r} already exists"])
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(game)
        return game

    def update_game(self, game_id: int, patch: Mapping[str, Any]) -> DBGames:
        """Change catalog fields of a game. Stored booking costs are not repriced."""
        try:
            game = self._lock_game(game_id)
            for name, value in patch.items():
                setattr(game, name, value)
            game.updated_at = func.now()
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError([f"Game {patch.get('name')!r} already exists"])
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(game)
        logger.info(f"Game {game_id} updated: {sorted(patch)}")
        return game

    def delete_game(self, game_id: int) -> None:
        """
        Delete a game that no booking refers to.

        Bookings are never removed or reassigned here: while any exist the
        delete is refused with ConflictError listing them, and the admin
        resolves them by hand first.
        """
        try:
            game = self._lock_game(game_id)
            booking_ids = [
                row.id
                for row in self.db.query(DBBookings.id)
                .filter(DBBookings.game_id == game_id)
                .order_by(DBBookings.id)
            ]
            if booking_ids:
                raise ConflictError(
                    f"Game {game_id} still has bookings; resolve them before deleting",
                    conflicting_ids=booking_ids,
                )
            self.db.delete(game)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Game {game_id} deleted")

    # ── Bookings: reads ──────────────────────────────────────────────────

    def read_booking(self, booking_id: int) -> DBBookings:
        booking = self.db.get(DBBookings, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def read_active_bookings(self, game_id: int, booking_date: date) -> list[DBBookings]:
        """
        Active bookings of a game on booking_date and the neighbouring days.

        Neighbours are included so that overnight bookings crossing midnight
        are seen by the conflict checker; it places them on the right day.
        """
        return (
            self.db.query(DBBookings)
            .filter(
                DBBookings.game_id == game_id,
                DBBookings.booking_date >= booking_date - timedelta(days=1),
                DBBookings.booking_date <= booking_date + timedelta(days=1),
                DBBookings.status.in_(ACTIVE_STATUS_VALUES),
            )
            .order_by(DBBookings.booking_date, DBBookings.start_time)
            .all()
        )

    def list_bookings(
        self,
        user_id: int | None = None,
        game_id: int | None = None,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        active_only: bool = False,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[DBBookings]:
        q = self.db.query(DBBookings)

        if user_id is not None:
            q = q.filter(DBBookings.user_id == user_id)
        if game_id is not None:
            q = q.filter(DBBookings.game_id == game_id)
        if status is not None:
            q = q.filter(DBBookings.status == BookingStatus(status).value)
        if active_only:
            q = q.filter(DBBookings.status.in_(ACTIVE_STATUS_VALUES))
        if date_from is not None:
            q = q.filter(DBBookings.booking_date >= date_from)
        if date_to is not None:
            q = q.filter(DBBookings.booking_date <= date_to)

        if newest_first:
            q = q.order_by(DBBookings.booking_date.desc(), DBBookings.start_time.desc())
        else:
            q = q.order_by(DBBookings.booking_date, DBBookings.start_time)

        if limit:
            q = q.limit(limit)
        return q.all()

    def booking_stats(self, game_id: int | None = None) -> dict:
        """Counts per status and revenue of confirmed + completed bookings."""
        q = self.db.query(
            DBBookings.status,
            func.count(DBBookings.id),
            func.coalesce(func.sum(DBBookings.total_cost), 0),
        )
        if game_id is not None:
            q = q.filter(DBBookings.game_id == game_id)
        rows = q.group_by(DBBookings.status).all()

        by_status = {s.value: 0 for s in BookingStatus}
        revenue = 0
        for status, count, cost in rows:
            by_status[status] = count
            if status in (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value):
                revenue += int(cost)

        return {
            "total_bookings": sum(by_status.values()),
            "by_status": by_status,
            "total_revenue": revenue,
        }

    def list_audit(self, booking_id: int | None = None, limit: int = 50) -> list[DBAuditLog]:
        q = self.db.query(DBAuditLog)
        if booking_id is not None:
            q = q.filter(DBAuditLog.booking_id == booking_id)
        return (
            q.order_by(DBAuditLog.changed_at.desc(), DBAuditLog.id.desc())
            .limit(min(limit, 200))
            .all()
        )

    # ── Bookings: writes ─────────────────────────────────────────────────

    def _lock_game(self, game_id: int) -> DBGames:
        game = (
            self.db.query(DBGames)
            .filter(DBGames.id == game_id)
            .with_for_update()
            .one_or_none()
        )
        if not game:
            raise NotFoundError("Game", game_id)
        return game

    def _lock_booking(self, booking_id: int) -> DBBookings:
        booking = (
            self.db.query(DBBookings)
            .filter(DBBookings.id == booking_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def _raise_if_conflict(
        self,
        game_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: int | None = None,
    ) -> None:
        active = self.read_active_bookings(game_id, booking_date)
        conflicts = find_conflicts(
            game_id, booking_date, start_time, end_time, active, exclude_booking_id
        )
        if conflicts:
            logger.info(
                f"Booking conflict: game={game_id} {booking_date} {start_time}-{end_time} "
                f"overlaps {[b.id for b in conflicts]}"
            )
            raise ConflictError(conflicting_ids=[b.id for b in conflicts])

    def _audit(
        self,
        booking: DBBookings,
        old_status: str | None,
        new_status: str,
        changed_by: int | None,
        notes: str,
    ) -> None:
        self.db.add(DBAuditLog(
            booking=booking,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
            notes=notes,
        ))

    def insert_booking(self, record: Mapping[str, Any]) -> DBBookings:
        """
        Atomically check for overlap and insert a booking row.

        record: user_id, game_id, booking_date, start_time, end_time,
                status, total_cost, notes
        """
        try:
            self._lock_game(record["game_id"])
            self._raise_if_conflict(
                record["game_id"],
                record["booking_date"],
                record["start_time"],
                record["end_time"],
            )

            booking = DBBookings(**record)
            self.db.add(booking)
            self._audit(
                booking, None, booking.status, record["user_id"], "Booking created"
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: game={booking.game_id} {booking.booking_date} "
            f"{booking.start_time}-{booking.end_time} status={booking.status}"
        )
        return booking

    def update_booking_status(
        self,
        booking_id: int,
        new_status: BookingStatus,
        actor: Actor,
        settings: SystemSettings,
        now: datetime,
        notes: str | None = None,
    ) -> DBBookings:
        """Apply one lifecycle transition and its audit entry, or nothing."""
        new_status = BookingStatus(new_status)
        try:
            booking = self._lock_booking(booking_id)
            old_status = booking.status
            check_transition(booking, new_status, actor, settings, now)

            booking.status = new_status.value
            if notes is not None:
                booking.notes = notes
            booking.updated_at = func.now()
            self._audit(booking, old_status, new_status.value, actor.user_id, audit_note(new_status))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking_id}: {old_status} -> {new_status.value} "
            f"by {actor.role.value} {actor.user_id}"
        )
        return booking

    def reschedule_booking(
        self,
        booking_id: int,
        actor: Actor,
        booking_date: date,
        start_time: str,
        end_time: str,
        total_cost: int,
        settings: SystemSettings,
        now: datetime,
    ) -> DBBookings:
        """Move an active booking to a new interval, excluding itself from the check."""
        try:
            booking = self._lock_booking(booking_id)
            self._lock_game(booking.game_id)

            current = BookingStatus(booking.status)
            check_reschedule(booking, actor, settings, now)

            self._raise_if_conflict(
                booking.game_id, booking_date, start_time, end_time,
                exclude_booking_id=booking.id,
            )

            previous = f"{booking.booking_date} {booking.start_time}-{booking.end_time}"
            booking.booking_date = booking_date
            booking.start_time = start_time
            booking.end_time = end_time
            booking.total_cost = total_cost
            booking.updated_at = func.now()
            self._audit(
                booking, current.value, current.value, actor.user_id,
                f"Rescheduled from {previous}",
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"Booking {booking_id} rescheduled to {booking_date} {start_time}-{end_time}")
        return booking
