# backend/tablebook/services/slots/config.py
"""
Slot grid constants and time helpers.
"""

from datetime import time

# Upper bound on slots generated for one window. A misconfigured window
# stops here instead of producing an unbounded list.
MAX_SLOTS_PER_WINDOW = 200

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)

