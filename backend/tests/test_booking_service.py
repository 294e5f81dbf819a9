import json
from datetime import date, datetime, timedelta

import pytest

from arenaslot.services import booking_service
from arenaslot.services.booking_store import BookingStore
from arenaslot.services.errors import (
    ConflictError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from arenaslot.services.events import P2P_QUEUE
from arenaslot.services.lifecycle import Actor, ActorRole, BookingStatus
from arenaslot.services.slots.config import DEFAULT_SETTINGS, SystemSettings

from conftest import NOW, TOMORROW

ADMIN = Actor(user_id=1, role=ActorRole.ADMIN)
OWNER = Actor(user_id=7)


def create(db, game, start="14:00", end="15:30", day=TOMORROW, user_id=7, **kwargs):
    return booking_service.create_booking(
        db,
        user_id=user_id,
        game_id=game.id,
        booking_date=day,
        start_time=start,
        end_time=end,
        now=kwargs.pop("now", NOW),
        **kwargs,
    )


def pushed_events(redis):
    return [json.loads(c.args[1]) for c in redis.rpush.call_args_list if c.args[0] == P2P_QUEUE]


def test_create_booking_pending_with_price(db, game):
    booking = create(db, game, notes="Bring shuttles")

    assert booking.status == "pending"
    assert booking.total_cost == 750
    assert booking.notes == "Bring shuttles"


def test_create_booking_confirmed_without_approval(db, game):
    booking_service.update_settings(db, {"require_admin_approval": False})
    assert create(db, game).status == "confirmed"


def test_overlap_is_a_conflict(db, game):
    create(db, game, "14:00", "15:30")
    with pytest.raises(ConflictError):
        create(db, game, "15:00", "16:00", user_id=8)


def test_unknown_game(db):
    with pytest.raises(NotFoundError):
        booking_service.create_booking(db, 7, 999, TOMORROW, "10:00", "11:00", now=NOW)


@pytest.mark.parametrize(
    "day, start, end, message",
    [
        (NOW.date() + timedelta(days=8), "10:00", "11:00", "Booking date must be between today and 7 days ahead"),
        (NOW.date() - timedelta(days=1), "10:00", "11:00", "Booking date must be between today and 7 days ahead"),
        (NOW.date(), "07:00", "08:00", "Start time is in the past"),
        (TOMORROW, "10:15", "11:15", "Start time is outside operating hours or not on the slot grid"),
        (TOMORROW, "05:00", "06:00", "Start time is outside operating hours or not on the slot grid"),
        (TOMORROW, "15:00", "14:00", "End time must be after start time"),
        (TOMORROW, "10:00", "10:00", "End time must be after start time"),
    ],
)
def test_selection_rejected(db, game, day, start, end, message):
    with pytest.raises(ValidationError) as exc:
        create(db, game, start, end, day=day)
    assert message in exc.value.errors


@pytest.mark.parametrize("start, end", [("10:00", "10:30"), ("10:00", "15:00"), ("21:00", "22:30")])
def test_duration_out_of_bounds(db, game, start, end):
    with pytest.raises(ValidationError) as exc:
        create(db, game, start, end)
    assert exc.value.errors[0].startswith("Duration must be between 1.0 and 4.0 hours")


def test_validate_selection_overnight_under_24_7():
    settings = SystemSettings(is_24_7=True, max_booking_duration=6)
    assert booking_service.validate_selection(settings, TOMORROW, "23:00", "05:00", NOW) == []
    assert booking_service.validate_selection(DEFAULT_SETTINGS, TOMORROW, "23:00", "05:00", NOW) != []


def test_quote_booking(db, game):
    quote = booking_service.quote_booking(db, game.id, TOMORROW, "14:00", "15:30", now=NOW)

    assert quote.duration_minutes == 90
    assert quote.total_cost == 750
    assert quote.status == BookingStatus.PENDING
    assert BookingStore(db).list_bookings() == []


def test_overnight_booking_costs_six_hours(db, game):
    booking_service.update_settings(db, {"is_24_7": True, "max_booking_duration": 6})
    booking = create(db, game, "23:00", "05:00")

    assert booking.total_cost == 500 * 6
    with pytest.raises(ConflictError):
        create(db, game, "01:00", "02:00", day=TOMORROW + timedelta(days=1), user_id=8)


def test_create_emits_event_and_drops_cache(db, game, redis):
    booking = create(db, game, redis=redis)

    [event] = pushed_events(redis)
    assert event["type"] == "booking_created"
    assert event["booking_id"] == booking.id
    assert event["total_cost"] == 750

    deleted = redis.delete.call_args.args
    assert deleted == tuple(
        f"slots:day:{game.id}:{TOMORROW + timedelta(days=d)}" for d in (-1, 0, 1)
    )


def test_failed_create_emits_nothing(db, game, redis):
    create(db, game)
    redis.reset_mock()

    with pytest.raises(ConflictError):
        create(db, game, user_id=8, redis=redis)

    redis.rpush.assert_not_called()


def test_change_status_emits_old_and_new(db, game, redis):
    booking = create(db, game)

    updated = booking_service.change_status(db, booking.id, BookingStatus.CONFIRMED, ADMIN, redis=redis, now=NOW)

    assert updated.status == "confirmed"
    [event] = pushed_events(redis)
    assert event["type"] == "booking_status_changed"
    assert event["old_status"] == "pending"
    assert event["status"] == "confirmed"
    assert event["changed_by"] == 1


def test_completed_cannot_return_to_confirmed(db, game):
    booking = create(db, game)
    booking_service.change_status(db, booking.id, BookingStatus.CONFIRMED, ADMIN, now=NOW)
    booking_service.change_status(db, booking.id, BookingStatus.COMPLETED, ADMIN, now=NOW)

    with pytest.raises(InvalidTransition):
        booking_service.change_status(db, booking.id, BookingStatus.CONFIRMED, ADMIN, now=NOW)


def test_owner_cancel_respects_deadline(db, game):
    booking = create(db, game, "09:00", "10:00")
    booking_service.change_status(db, booking.id, BookingStatus.CONFIRMED, ADMIN, now=NOW)

    with pytest.raises(InvalidTransition):
        booking_service.change_status(
            db, booking.id, BookingStatus.CANCELED, OWNER, now=datetime(2026, 10, 20, 7, 30)
        )

    canceled = booking_service.change_status(db, booking.id, BookingStatus.CANCELED, OWNER, now=NOW)
    assert canceled.status == "canceled"


def test_reschedule_booking(db, game, redis):
    booking = create(db, game, "14:00", "15:30")
    day_after = TOMORROW + timedelta(days=1)

    moved = booking_service.reschedule_booking(
        db, booking.id, OWNER, day_after, "18:00", "20:00", redis=redis, now=NOW
    )

    assert moved.booking_date == day_after
    assert moved.total_cost == 1000
    [event] = pushed_events(redis)
    assert event["type"] == "booking_rescheduled"
    assert event["previous_date"] == TOMORROW.isoformat()


def test_reschedule_is_validated(db, game):
    booking = create(db, game)
    with pytest.raises(ValidationError):
        booking_service.reschedule_booking(db, booking.id, OWNER, TOMORROW, "21:30", "23:00", now=NOW)


def test_owner_cannot_dodge_deadline_by_rescheduling(db, game, redis):
    booking = create(db, game, "09:00", "10:00")
    booking_service.change_status(db, booking.id, BookingStatus.CONFIRMED, ADMIN, now=NOW)
    late = datetime(2026, 10, 20, 7, 30)

    with pytest.raises(InvalidTransition):
        booking_service.reschedule_booking(
            db, booking.id, OWNER, TOMORROW, "16:00", "17:00", redis=redis, now=late
        )
    with pytest.raises(InvalidTransition):
        booking_service.change_status(db, booking.id, BookingStatus.CANCELED, OWNER, now=late)

    kept = BookingStore(db).read_booking(booking.id)
    assert (kept.start_time, kept.status) == ("09:00", "confirmed")
    assert pushed_events(redis) == []


def test_upcoming_and_history(db, game):
    store = BookingStore(db)
    today = date(2026, 10, 19)

    def insert(day, start, status="confirmed"):
        return store.insert_booking({
            "user_id": 7, "game_id": game.id, "booking_date": day,
            "start_time": start, "end_time": f"{int(start[:2]) + 1:02d}:00",
            "status": status, "total_cost": 500,
        })

    insert(today - timedelta(days=3), "10:00", "completed")
    insert(today - timedelta(days=1), "10:00", "no_show")
    insert(today, "18:00")
    insert(today + timedelta(days=2), "10:00", "pending")
    insert(today + timedelta(days=2), "12:00", "canceled")

    upcoming = booking_service.upcoming_bookings(db, 7, today=today)
    history = booking_service.booking_history(db, 7, today=today)

    assert [(b.booking_date, b.start_time) for b in upcoming] == [
        (today, "18:00"),
        (today + timedelta(days=2), "10:00"),
    ]
    assert [b.status for b in history] == ["no_show", "completed"]
    assert booking_service.upcoming_bookings(db, 8, today=today) == []
