# backend/arenaslot/services/slots/config.py
"""
Operating configuration for slot calculation (settings resolver).

SystemSettings is a read-only snapshot of the single system_settings row.
It is read once per request and passed explicitly into every calculation,
so a request never mixes fields of an old and a new settings row.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping


ALLOWED_SLOT_DURATIONS = (15, 30, 60)
MINUTES_PER_DAY = 24 * 60


def time_str_to_minutes(value: str) -> int:
    """
    "HH:MM" (or "HH:MM:SS" as stored by TIME columns) → minutes since midnight.

    Raises ValueError for malformed strings.
    """
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time string: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time string: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Minutes since midnight → "HH:MM". Values past midnight wrap around."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class SystemSettings:
    """
    Venue operating configuration.

    Attributes:
        opening_time / closing_time: "HH:MM", ignored when is_24_7
        is_24_7: full-day operation; end <= start wraps past midnight
        advance_booking_days: how far ahead a booking date may be (1..30)
        booking_slot_duration: grid step in minutes (15/30/60)
        min_booking_duration / max_booking_duration: hours, may be fractional
        cancellation_deadline: hours before start after which users cannot cancel
        require_admin_approval: new bookings start as pending instead of confirmed
    """
    opening_time: str = "06:00"
    closing_time: str = "22:00"
    is_24_7: bool = False
    advance_booking_days: int = 7
    booking_slot_duration: int = 30
    min_booking_duration: float = 1.0
    max_booking_duration: float = 4.0
    cancellation_deadline: float = 2
    require_admin_approval: bool = True

    @property
    def opening_minute(self) -> int:
        return 0 if self.is_24_7 else time_str_to_minutes(self.opening_time)

    @property
    def closing_minute(self) -> int:
        return MINUTES_PER_DAY if self.is_24_7 else time_str_to_minutes(self.closing_time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS = SystemSettings()

SETTINGS_FIELDS = tuple(f.name for f in fields(SystemSettings))


@dataclass(frozen=True)
class SettingsValidation:
    is_valid: bool
    errors: list[str]


NUMERIC_FIELDS = {
    "advance_booking_days": "Advance booking days",
    "booking_slot_duration": "Booking slot duration",
    "min_booking_duration": "Minimum booking duration",
    "max_booking_duration": "Maximum booking duration",
    "cancellation_deadline": "Cancellation deadline",
}


def _is_set(patch: Mapping[str, Any], key: str) -> bool:
    return patch.get(key) is not None


def _numbers(patch: Mapping[str, Any], errors: list[str]) -> dict[str, float]:
    """Present numeric fields as floats; values that are not numbers become errors."""
    values = {}
    for key, label in NUMERIC_FIELDS.items():
        if not _is_set(patch, key):
            continue
        try:
            values[key] = float(patch[key])
        except (TypeError, ValueError):
            errors.append(f"{label} must be a number")
    return values


def validate_settings(patch: Mapping[str, Any]) -> SettingsValidation:
    """
    Validate a full or partial settings mapping.

    Every rule is checked independently and all violations are collected.
    Fields that are absent (or None) are not checked. Never raises.
    """
    errors: list[str] = []
    numbers = _numbers(patch, errors)

    if not patch.get("is_24_7") and _is_set(patch, "opening_time") and _is_set(patch, "closing_time"):
        try:
            open_min = time_str_to_minutes(patch["opening_time"])
            close_min = time_str_to_minutes(patch["closing_time"])
        except (ValueError, AttributeError):
            errors.append("Opening and closing times must be in HH:MM format")
        else:
            if open_min >= close_min:
                errors.append("Opening time must be before closing time")

    if "advance_booking_days" in numbers and not 1 <= numbers["advance_booking_days"] <= 30:
        errors.append("Advance booking days must be between 1 and 30")

    if "booking_slot_duration" in numbers and numbers["booking_slot_duration"] not in ALLOWED_SLOT_DURATIONS:
        errors.append("Booking slot duration must be 15, 30, or 60 minutes")

    if "min_booking_duration" in numbers and "max_booking_duration" in numbers:
        if numbers["min_booking_duration"] >= numbers["max_booking_duration"]:
            errors.append("Minimum booking duration must be less than maximum duration")

    if "min_booking_duration" in numbers and not 0.5 <= numbers["min_booking_duration"] <= 8:
        errors.append("Minimum booking duration must be between 0.5 and 8 hours")

    if "max_booking_duration" in numbers and not 1 <= numbers["max_booking_duration"] <= 12:
        errors.append("Maximum booking duration must be between 1 and 12 hours")

    if "cancellation_deadline" in numbers and not 0 <= numbers["cancellation_deadline"] <= 48:
        errors.append("Cancellation deadline must be between 0 and 48 hours")

    return SettingsValidation(is_valid=not errors, errors=errors)


def merge_settings(current: SystemSettings, patch: Mapping[str, Any]) -> SystemSettings:
    """Apply a partial update on top of a snapshot. Unknown keys and None values are ignored."""
    changes = {k: v for k, v in patch.items() if k in SETTINGS_FIELDS and v is not None}
    return replace(current, **changes)
