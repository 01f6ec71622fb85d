from .tables import (
    Base,
    Reservations,
    SlotOccupancy,
    SpecialDays,
    VenueSettings,
    WeeklySchedule,
    metadata,
)

__all__ = [
    "Base",
    "Reservations",
    "SlotOccupancy",
    "SpecialDays",
    "VenueSettings",
    "WeeklySchedule",
    "metadata",
]
