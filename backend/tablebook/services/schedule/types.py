# backend/tablebook/services/schedule/types.py
"""
Schedule value objects.

All of them are frozen: a request reads one snapshot of the venue schedule
and never sees a half-applied staff edit.
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Optional


class Shift(str, Enum):
    LUNCH = "LUNCH"
    DINNER = "DINNER"


def parse_time(value: str) -> time:
    """Parse "HH:MM" into a time. Raises ValueError on anything else."""
    if not isinstance(value, str) or len(value) != 5 or value[2] != ":":
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return time(int(value[:2]), int(value[3:]))


def format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def weekday_id(target_date: date) -> int:
    """Weekday id used by the schedule: 0 = Sunday ... 6 = Saturday."""
    return (target_date.weekday() + 1) % 7


@dataclass(frozen=True)
class TimeWindow:
    start: time
    end: time

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeWindow":
        window = cls(parse_time(start), parse_time(end))
        if not window.is_valid:
            raise ValueError(f"Window start {start} is after end {end}")
        return window

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


@dataclass(frozen=True)
class WeeklyScheduleEntry:
    weekday: int
    is_open: bool
    lunch: TimeWindow
    dinner: TimeWindow


@dataclass(frozen=True)
class SpecialDayOverride:
    """
    Per-date exception to the weekly template.

    lunch / dinner left as None inherit the weekly entry; lunch_closed /
    dinner_closed drop a single shift for the date.
    """
    date: date
    is_closed: bool
    lunch: Optional[TimeWindow] = None
    dinner: Optional[TimeWindow] = None
    lunch_closed: bool = False
    dinner_closed: bool = False
    note: Optional[str] = None


@dataclass(frozen=True)
class EffectiveDaySchedule:
    closed: bool
    lunch: Optional[TimeWindow] = None
    dinner: Optional[TimeWindow] = None

    def window_for(self, shift: Shift) -> Optional[TimeWindow]:
        return self.lunch if shift == Shift.LUNCH else self.dinner


CLOSED_DAY = EffectiveDaySchedule(closed=True)

DEFAULT_LUNCH = TimeWindow(time(13, 0), time(15, 30))
DEFAULT_DINNER = TimeWindow(time(20, 0), time(23, 0))

# Open Monday to Saturday, closed on Sunday
DEFAULT_WEEKLY_TEMPLATE: tuple[WeeklyScheduleEntry, ...] = tuple(
    WeeklyScheduleEntry(
        weekday=day,
        is_open=day != 0,
        lunch=DEFAULT_LUNCH,
        dinner=DEFAULT_DINNER,
    )
    for day in range(7)
)
