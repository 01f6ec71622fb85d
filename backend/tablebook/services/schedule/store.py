# backend/tablebook/services/schedule/store.py
"""
Schedule storage: weekly template (seven rows) and special-day overrides.

Reads return frozen value objects built from the current rows, so every
request works on its own snapshot. Writes replace whole rows
(last writer wins).
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import SpecialDays, WeeklySchedule
from .types import (
    DEFAULT_WEEKLY_TEMPLATE,
    SpecialDayOverride,
    TimeWindow,
    WeeklyScheduleEntry,
    format_time,
)

logger = logging.getLogger(__name__)


def _now_str() -> str:
    return datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")


def _optional_window(start: Optional[str], end: Optional[str]) -> Optional[TimeWindow]:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ValueError(f"Incomplete window: start={start!r} end={end!r}")
    return TimeWindow.parse(start, end)


def override_from_row(row: SpecialDays) -> SpecialDayOverride:
    """Build an override from its row. Raises ValueError on malformed data."""
    return SpecialDayOverride(
        date=date.fromisoformat(row.date),
        is_closed=bool(row.is_closed),
        lunch=_optional_window(row.lunch_start, row.lunch_end),
        dinner=_optional_window(row.dinner_start, row.dinner_end),
        lunch_closed=bool(row.lunch_closed),
        dinner_closed=bool(row.dinner_closed),
        note=row.note,
    )


def validate_weekly_template(entries: Iterable[WeeklyScheduleEntry]) -> tuple[WeeklyScheduleEntry, ...]:
    """Exactly seven entries, one per weekday id 0..6, windows with start <= end."""
    entries = tuple(sorted(entries, key=lambda e: e.weekday))
    weekdays = [e.weekday for e in entries]
    if weekdays != list(range(7)):
        raise ValueError(f"Weekly template needs one entry per weekday 0..6, got {weekdays}")
    for entry in entries:
        if not entry.lunch.is_valid or not entry.dinner.is_valid:
            raise ValueError(f"Weekday {entry.weekday}: window start is after end")
    return entries


class ScheduleStore:
    """Session-bound access to the weekly template and special days."""

    def __init__(self, db: Session):
        self.db = db

    # ── Weekly template ──────────────────────────────────────────────────

    def weekly_template(self) -> tuple[WeeklyScheduleEntry, ...]:
        """
        Seven entries ordered by weekday id.

        Weekdays without a row (fresh database) or with an unreadable row use
        the built-in default entry.
        """
        rows = {row.weekday: row for row in self.db.query(WeeklySchedule).all()}
        entries = []
        for default in DEFAULT_WEEKLY_TEMPLATE:
            row = rows.get(default.weekday)
            if row is None:
                entries.append(default)
                continue
            try:
                entries.append(self._entry_from_row(row))
            except ValueError as e:
                logger.warning(f"Malformed weekly schedule row weekday={row.weekday}: {e}")
                entries.append(default)
        return tuple(entries)

    def weekly_entry(self, weekday: int) -> WeeklyScheduleEntry:
        row = self.db.get(WeeklySchedule, weekday)
        if row is None:
            return DEFAULT_WEEKLY_TEMPLATE[weekday]
        try:
            return self._entry_from_row(row)
        except ValueError as e:
            logger.warning(f"Malformed weekly schedule row weekday={weekday}: {e}")
            return DEFAULT_WEEKLY_TEMPLATE[weekday]

    def replace_weekly_template(
        self,
        entries: Iterable[WeeklyScheduleEntry],
    ) -> tuple[WeeklyScheduleEntry, ...]:
        entries = validate_weekly_template(entries)
        updated_at = _now_str()

        for entry in entries:
            row = self.db.get(WeeklySchedule, entry.weekday)
            if row is None:
                row = WeeklySchedule(weekday=entry.weekday)
                self.db.add(row)
            row.is_open = int(entry.is_open)
            row.lunch_start = format_time(entry.lunch.start)
            row.lunch_end = format_time(entry.lunch.end)
            row.dinner_start = format_time(entry.dinner.start)
            row.dinner_end = format_time(entry.dinner.end)
            row.updated_at = updated_at

        self.db.commit()
        logger.info("Weekly schedule replaced")
        return entries

    @staticmethod
    def _entry_from_row(row: WeeklySchedule) -> WeeklyScheduleEntry:
        return WeeklyScheduleEntry(
            weekday=row.weekday,
            is_open=bool(row.is_open),
            lunch=TimeWindow.parse(row.lunch_start, row.lunch_end),
            dinner=TimeWindow.parse(row.dinner_start, row.dinner_end),
        )

    # ── Special days ─────────────────────────────────────────────────────

    def special_day_row(self, target_date: date) -> Optional[SpecialDays]:
        return (
            self.db.query(SpecialDays)
            .filter(SpecialDays.date == target_date.isoformat())
            .first()
        )

    def special_day(self, target_date: date) -> Optional[SpecialDayOverride]:
        """Override for the date, or None. Raises ValueError if the row is malformed."""
        row = self.special_day_row(target_date)
        if row is None:
            return None
        return override_from_row(row)

    def list_special_days(self, from_date: Optional[date] = None) -> list[SpecialDays]:
        query = self.db.query(SpecialDays)
        if from_date is not None:
            query = query.filter(SpecialDays.date >= from_date.isoformat())
        return query.order_by(SpecialDays.date.asc()).all()

    def upsert_special_day(self, override: SpecialDayOverride) -> SpecialDays:
        row = self.special_day_row(override.date)
        if row is None:
            row = SpecialDays(date=override.date.isoformat(), created_at=_now_str())
            self.db.add(row)

        row.is_closed = int(override.is_closed)
        row.lunch_closed = int(override.lunch_closed)
        row.dinner_closed = int(override.dinner_closed)
        row.lunch_start = format_time(override.lunch.start) if override.lunch else None
        row.lunch_end = format_time(override.lunch.end) if override.lunch else None
        row.dinner_start = format_time(override.dinner.start) if override.dinner else None
        row.dinner_end = format_time(override.dinner.end) if override.dinner else None
        row.note = override.note
        row.updated_at = _now_str()

        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Special day upserted: date={row.date}, closed={override.is_closed}")
        return row

    def delete_special_day(self, target_date: date) -> bool:
        row = self.special_day_row(target_date)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        logger.info(f"Special day deleted: date={target_date.isoformat()}")
        return True
