# backend/tablebook/services/slots/__init__.py
"""
Slots calculation module.

Generation from the effective schedule, occupancy counts and the final
per-slot availability for a date.
"""

from .config import MAX_SLOTS_PER_WINDOW
from .calculator import Slot, generate_day_slots, generate_slots
from .occupancy import OccupancyIndex
from .availability import (
    AvailabilityCalculator,
    AvailableSlot,
    DayAvailability,
    calculate_availability,
)

__all__ = [
    "MAX_SLOTS_PER_WINDOW",
    "Slot",
    "generate_day_slots",
    "generate_slots",
    "OccupancyIndex",
    "AvailabilityCalculator",
    "AvailableSlot",
    "DayAvailability",
    "calculate_availability",
]
