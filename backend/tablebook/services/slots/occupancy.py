# backend/tablebook/services/slots/occupancy.py
"""
Active reservation counts per time slot for one date.

Always queries committed rows: availability and booking must never act on a
cached count.
"""

import logging
from datetime import date, time

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Reservations
from ..schedule import parse_time

logger = logging.getLogger(__name__)

CANCELED = "CANCELED"


class OccupancyIndex:
    def __init__(self, db: Session):
        self.db = db

    def counts_by_time(self, target_date: date) -> dict[time, int]:
        rows = (
            self.db.query(Reservations.time_slot, func.count(Reservations.id))
            .filter(
                Reservations.date == target_date.isoformat(),
                Reservations.status != CANCELED,
            )
            .group_by(Reservations.time_slot)
            .all()
        )

        counts: dict[time, int] = {}
        for time_slot, count in rows:
            try:
                counts[parse_time(time_slot)] = count
            except ValueError:
                logger.warning(
                    f"Skipping reservations with malformed time_slot={time_slot!r} "
                    f"on {target_date.isoformat()}"
                )
        return counts
