# backend/arenaslot/services/slots/__init__.py
"""
Slots calculation module.

Settings resolver: SystemSettings snapshot + validation
Slot generator:    candidate start times / legal end times
Availability:      free start times (cached in Redis Sorted Sets)
                   and free end times for a start (calculated on-the-fly)
"""

from .config import (
    DEFAULT_SETTINGS,
    SettingsValidation,
    SystemSettings,
    merge_settings,
    validate_settings,
)
from .calculator import (
    booking_duration_minutes,
    generate_candidate_start_times,
    generate_legal_end_times,
)
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_all, invalidate_game_dates

__all__ = [
    "DEFAULT_SETTINGS",
    "SettingsValidation",
    "SystemSettings",
    "merge_settings",
    "validate_settings",
    "booking_duration_minutes",
    "generate_candidate_start_times",
    "generate_legal_end_times",
    "SlotsRedisStore",
    "invalidate_all",
    "invalidate_game_dates",
]
