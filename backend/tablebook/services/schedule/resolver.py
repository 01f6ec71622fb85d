# backend/tablebook/services/schedule/resolver.py
"""
Effective schedule for one calendar date.

Merge rule: a special-day override always wins over the weekly template,
field by field. Override windows left unset inherit the template.
"""

import logging
from datetime import date
from typing import Optional

from .store import ScheduleStore
from .types import (
    CLOSED_DAY,
    EffectiveDaySchedule,
    SpecialDayOverride,
    WeeklyScheduleEntry,
    weekday_id,
)

logger = logging.getLogger(__name__)


def resolve_day(
    weekly: WeeklyScheduleEntry,
    override: Optional[SpecialDayOverride] = None,
) -> EffectiveDaySchedule:
    """Pure merge of a weekly entry with an optional override."""
    if override is None:
        if not weekly.is_open:
            return CLOSED_DAY
        return EffectiveDaySchedule(closed=False, lunch=weekly.lunch, dinner=weekly.dinner)

    if override.is_closed:
        return CLOSED_DAY

    lunch = None if override.lunch_closed else (override.lunch or weekly.lunch)
    dinner = None if override.dinner_closed else (override.dinner or weekly.dinner)

    if lunch is None and dinner is None:
        return CLOSED_DAY

    return EffectiveDaySchedule(closed=False, lunch=lunch, dinner=dinner)


class ScheduleResolver:
    def __init__(self, store: ScheduleStore):
        self.store = store

    def resolve(self, target_date: date) -> EffectiveDaySchedule:
        weekly = self.store.weekly_entry(weekday_id(target_date))

        try:
            override = self.store.special_day(target_date)
        except ValueError as e:
            # Fall back to the template rather than closing the day
            logger.warning(
                f"Ignoring malformed special day {target_date.isoformat()}: {e}"
            )
            override = None

        return resolve_day(weekly, override)
