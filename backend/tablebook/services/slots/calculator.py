# backend/tablebook/services/slots/calculator.py
"""
Slot generation.

A window produces every time from start to end inclusive, stepping by the
venue interval. A day produces lunch slots first, then dinner slots.

Pure functions: no storage access, a new list on every call.
"""

import logging
from dataclasses import dataclass
from datetime import time

from ..schedule import EffectiveDaySchedule, Shift, TimeWindow
from .config import MAX_SLOTS_PER_WINDOW, MINUTES_PER_DAY, minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    time: time
    shift: Shift


def generate_slots(window: TimeWindow, interval_minutes: int) -> list[time]:
    """
    Times from window.start to window.end inclusive.

    Returns:
        Ascending list of times. Empty when end < start.
    """
    if isinstance(interval_minutes, bool) or not isinstance(interval_minutes, int) or interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be a positive integer, got {interval_minutes!r}")

    start_min = time_to_minutes(window.start)
    end_min = time_to_minutes(window.end)

    slots: list[time] = []
    t = start_min
    while t <= end_min and t < MINUTES_PER_DAY:
        if len(slots) >= MAX_SLOTS_PER_WINDOW:
            logger.warning(
                f"Slot ceiling {MAX_SLOTS_PER_WINDOW} reached for window {window} "
                f"(interval {interval_minutes} min)"
            )
            break
        slots.append(minutes_to_time(t))
        t += interval_minutes

    return slots


def generate_day_slots(
    schedule: EffectiveDaySchedule,
    interval_minutes: int,
) -> list[Slot]:
    """All slots of an effective day, lunch before dinner. Closed day → []."""
    if schedule.closed:
        return []

    slots: list[Slot] = []
    for shift in (Shift.LUNCH, Shift.DINNER):
        window = schedule.window_for(shift)
        if window is None:
            continue
        slots.extend(Slot(t, shift) for t in generate_slots(window, interval_minutes))
    return slots
