"""Settings resolver: validation rules, partial updates and persistence."""

import pytest

from arenaslot.services import booking_service
from arenaslot.services.booking_store import BookingStore
from arenaslot.services.errors import NotFoundError, ValidationError
from arenaslot.services.slots.config import (
    DEFAULT_SETTINGS,
    merge_settings,
    minutes_to_time_str,
    time_str_to_minutes,
    validate_settings,
)


def test_defaults_are_valid():
    result = validate_settings(DEFAULT_SETTINGS.to_dict())
    assert result.is_valid
    assert result.errors == []


def test_empty_patch_is_valid():
    assert validate_settings({}).is_valid


def test_opening_must_be_before_closing():
    result = validate_settings({"opening_time": "22:00", "closing_time": "06:00"})
    assert not result.is_valid
    assert result.errors == ["Opening time must be before closing time"]

    equal = validate_settings({"opening_time": "10:00", "closing_time": "10:00"})
    assert equal.errors == ["Opening time must be before closing time"]


def test_hours_are_ignored_under_24_7():
    result = validate_settings({"opening_time": "22:00", "closing_time": "06:00", "is_24_7": True})
    assert result.is_valid


def test_malformed_hours():
    result = validate_settings({"opening_time": "6am", "closing_time": "22:00"})
    assert result.errors == ["Opening and closing times must be in HH:MM format"]


@pytest.mark.parametrize("days, ok", [(0, False), (1, True), (30, True), (31, False)])
def test_advance_booking_days_range(days, ok):
    assert validate_settings({"advance_booking_days": days}).is_valid is ok


@pytest.mark.parametrize("step, ok", [(15, True), (30, True), (60, True), (20, False), (45, False)])
def test_slot_duration_whitelist(step, ok):
    assert validate_settings({"booking_slot_duration": step}).is_valid is ok


def test_min_must_be_below_max():
    result = validate_settings({"min_booking_duration": 4, "max_booking_duration": 2})
    assert result.errors == ["Minimum booking duration must be less than maximum duration"]


def test_duration_ranges():
    result = validate_settings({"min_booking_duration": 0.25, "max_booking_duration": 13})
    assert result.errors == [
        "Minimum booking duration must be between 0.5 and 8 hours",
        "Maximum booking duration must be between 1 and 12 hours",
    ]


@pytest.mark.parametrize("hours, ok", [(0, True), (48, True), (-1, False), (49, False)])
def test_cancellation_deadline_range(hours, ok):
    assert validate_settings({"cancellation_deadline": hours}).is_valid is ok


def test_all_violations_are_collected():
    result = validate_settings({
        "advance_booking_days": 40,
        "booking_slot_duration": 20,
        "cancellation_deadline": -1,
    })
    assert len(result.errors) == 3


def test_merge_keeps_unset_fields():
    merged = merge_settings(DEFAULT_SETTINGS, {"opening_time": "08:00", "closing_time": None, "bogus": 1})
    assert merged.opening_time == "08:00"
    assert merged.closing_time == DEFAULT_SETTINGS.closing_time
    assert merged.booking_slot_duration == 30


def test_time_string_helpers():
    assert time_str_to_minutes("06:30") == 390
    assert time_str_to_minutes("23:59:00") == 1439
    assert minutes_to_time_str(1500) == "01:00"
    with pytest.raises(ValueError):
        time_str_to_minutes("24:00")


def test_numeric_strings_are_accepted():
    result = validate_settings({
        "advance_booking_days": "14",
        "booking_slot_duration": "30",
        "min_booking_duration": "1.5",
        "max_booking_duration": "4",
        "cancellation_deadline": "2",
    })
    assert result.is_valid, result.errors

    result = validate_settings({"min_booking_duration": "5", "max_booking_duration": "4"})
    assert result.errors == ["Minimum booking duration must be less than maximum duration"]


def test_non_numeric_values_are_reported():
    result = validate_settings({
        "advance_booking_days": "a week",
        "booking_slot_duration": [30],
        "min_booking_duration": "1",
        "max_booking_duration": "long",
        "cancellation_deadline": "",
    })

    assert not result.is_valid
    assert result.errors == [
        "Advance booking days must be a number",
        "Booking slot duration must be a number",
        "Maximum booking duration must be a number",
        "Cancellation deadline must be a number",
    ]


# ── Persistence ──────────────────────────────────────────────────────────


def test_read_settings_without_row(db):
    with pytest.raises(NotFoundError):
        BookingStore(db).read_settings()
    assert booking_service.get_settings(db) == DEFAULT_SETTINGS


def test_write_settings_partial_update(db):
    store = BookingStore(db)
    written = store.write_settings({"opening_time": "08:00", "require_admin_approval": False})

    assert written.opening_time == "08:00"
    assert written.closing_time == "22:00"
    assert written.require_admin_approval is False
    assert store.read_settings() == written


def test_write_settings_validates_merged_row(db):
    store = BookingStore(db)
    store.write_settings({"max_booking_duration": 6})

    # min alone is in range, but not below the stored max
    with pytest.raises(ValidationError) as exc:
        store.write_settings({"min_booking_duration": 7})

    assert exc.value.errors == ["Minimum booking duration must be less than maximum duration"]
    assert store.read_settings().min_booking_duration == 1.0


def test_invalid_first_write_stores_nothing(db):
    store = BookingStore(db)
    with pytest.raises(ValidationError):
        store.write_settings({"opening_time": "23:00"})
    with pytest.raises(NotFoundError):
        store.read_settings()


def test_settings_change_drops_slot_cache(db, redis):
    redis.scan_iter.return_value = iter(["slots:day:1:2026-10-20"])

    booking_service.update_settings(db, {"booking_slot_duration": 60}, redis)

    redis.scan_iter.assert_called_once_with(match="slots:day:*:*")
    redis.delete.assert_called_once_with("slots:day:1:2026-10-20")


def test_reset_settings(db):
    booking_service.update_settings(db, {"is_24_7": True, "advance_booking_days": 14})
    assert booking_service.reset_settings(db) == DEFAULT_SETTINGS
    assert BookingStore(db).read_settings() == DEFAULT_SETTINGS
