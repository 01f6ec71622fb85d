# backend/tablebook/services/schedule/__init__.py
"""
Venue schedule: weekly template, special-day overrides and their merge.
"""

from .types import (
    CLOSED_DAY,
    DEFAULT_WEEKLY_TEMPLATE,
    EffectiveDaySchedule,
    Shift,
    SpecialDayOverride,
    TimeWindow,
    WeeklyScheduleEntry,
    format_time,
    parse_time,
    weekday_id,
)
from .store import ScheduleStore
from .resolver import ScheduleResolver, resolve_day

__all__ = [
    "CLOSED_DAY",
    "DEFAULT_WEEKLY_TEMPLATE",
    "EffectiveDaySchedule",
    "Shift",
    "SpecialDayOverride",
    "TimeWindow",
    "WeeklyScheduleEntry",
    "format_time",
    "parse_time",
    "weekday_id",
    "ScheduleStore",
    "ScheduleResolver",
    "resolve_day",
]
