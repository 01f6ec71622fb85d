# backend/tablebook/services/slots/availability.py
"""
Per-slot availability for one date.

Combines:
- Effective schedule (weekly template + special day)
- Generated slots (lunch, then dinner)
- Active reservation counts
- Slot capacity and the current venue time

Read-only: showing a slot as available never reserves it. Capacity is
claimed only by ReservationLedger.create().
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import venue_now
from ..schedule import ScheduleResolver, ScheduleStore, Shift
from ..venue_settings import VenueConfig, load_venue_config
from .calculator import Slot, generate_day_slots
from .occupancy import OccupancyIndex

logger = logging.getLogger(__name__)

CLOSED_MESSAGE = "closed"
STORAGE_UNAVAILABLE_MESSAGE = "storage_unavailable"


@dataclass(frozen=True)
class AvailableSlot:
    time: time
    shift: Shift
    occupied: int
    capacity: int
    is_past: bool

    @property
    def available(self) -> bool:
        return not self.is_past and self.occupied < self.capacity


@dataclass(frozen=True)
class DayAvailability:
    date: date
    closed: bool
    slots: tuple[AvailableSlot, ...] = ()
    message: Optional[str] = None


def is_past_slot(target_date: date, slot: Slot, now: datetime) -> bool:
    """Earlier dates are entirely past; today only before now's time of day."""
    today = now.date()
    if target_date < today:
        return True
    if target_date > today:
        return False
    return slot.time < now.time()


class AvailabilityCalculator:
    def __init__(
        self,
        resolver: ScheduleResolver,
        occupancy: OccupancyIndex,
        capacity: int,
        interval_minutes: int,
    ):
        self.resolver = resolver
        self.occupancy = occupancy
        self.capacity = capacity
        self.interval_minutes = interval_minutes

    def availability(self, target_date: date, now: datetime) -> DayAvailability:
        schedule = self.resolver.resolve(target_date)
        if schedule.closed:
            return DayAvailability(date=target_date, closed=True, message=CLOSED_MESSAGE)

        slots = generate_day_slots(schedule, self.interval_minutes)
        counts = self.occupancy.counts_by_time(target_date)

        return DayAvailability(
            date=target_date,
            closed=False,
            slots=tuple(
                AvailableSlot(
                    time=slot.time,
                    shift=slot.shift,
                    occupied=counts.get(slot.time, 0),
                    capacity=self.capacity,
                    is_past=is_past_slot(target_date, slot, now),
                )
                for slot in slots
            ),
        )


def build_calculator(db: Session, venue: VenueConfig) -> AvailabilityCalculator:
    return AvailabilityCalculator(
        resolver=ScheduleResolver(ScheduleStore(db)),
        occupancy=OccupancyIndex(db),
        capacity=venue.slot_capacity,
        interval_minutes=venue.slot_interval_minutes,
    )


def calculate_availability(
    db: Session,
    target_date: date,
    now: datetime | None = None,
    venue: VenueConfig | None = None,
) -> DayAvailability:
    """
    Availability for a date, degrading to "closed" when storage fails.

    Failing to no availability is preferred to showing slots that may
    already be full.
    """
    now = now or venue_now()
    try:
        venue = venue or load_venue_config(db)
        return build_calculator(db, venue).availability(target_date, now)
    except SQLAlchemyError:
        logger.exception(f"Availability query failed for {target_date.isoformat()}")
        db.rollback()
        return DayAvailability(
            date=target_date,
            closed=True,
            message=STORAGE_UNAVAILABLE_MESSAGE,
        )
