"""Tests for the weekly template, special days and their merge."""

from datetime import date, time

import pytest

from tablebook.models import SpecialDays, WeeklySchedule
from tablebook.services.schedule import (
    CLOSED_DAY,
    DEFAULT_WEEKLY_TEMPLATE,
    ScheduleResolver,
    ScheduleStore,
    SpecialDayOverride,
    TimeWindow,
    WeeklyScheduleEntry,
    resolve_day,
    weekday_id,
)

from tests.conftest import MONDAY, SUNDAY

LUNCH = TimeWindow(time(13, 0), time(15, 30))
DINNER = TimeWindow(time(20, 0), time(23, 0))
OPEN_MONDAY = WeeklyScheduleEntry(weekday=1, is_open=True, lunch=LUNCH, dinner=DINNER)
CLOSED_SUNDAY = WeeklyScheduleEntry(weekday=0, is_open=False, lunch=LUNCH, dinner=DINNER)


def test_weekday_id_starts_on_sunday():
    assert weekday_id(SUNDAY) == 0
    assert weekday_id(MONDAY) == 1
    assert weekday_id(date(2099, 1, 10)) == 6


class TestResolveDay:
    """Pure merge rules."""

    def test_open_template_without_override(self):
        schedule = resolve_day(OPEN_MONDAY)

        assert not schedule.closed
        assert schedule.lunch == LUNCH
        assert schedule.dinner == DINNER

    def test_closed_template_without_override(self):
        assert resolve_day(CLOSED_SUNDAY) == CLOSED_DAY

    def test_closed_override_wins(self):
        override = SpecialDayOverride(date=MONDAY, is_closed=True)

        assert resolve_day(OPEN_MONDAY, override) == CLOSED_DAY

    def test_open_override_on_closed_template_day(self):
        override = SpecialDayOverride(date=SUNDAY, is_closed=False)

        schedule = resolve_day(CLOSED_SUNDAY, override)

        assert not schedule.closed
        assert schedule.lunch == LUNCH
        assert schedule.dinner == DINNER

    def test_override_window_replaces_only_its_shift(self):
        late_dinner = TimeWindow(time(21, 0), time(23, 30))
        override = SpecialDayOverride(date=MONDAY, is_closed=False, dinner=late_dinner)

        schedule = resolve_day(OPEN_MONDAY, override)

        assert schedule.lunch == LUNCH
        assert schedule.dinner == late_dinner

    def test_single_shift_closed(self):
        override = SpecialDayOverride(date=MONDAY, is_closed=False, lunch_closed=True)

        schedule = resolve_day(OPEN_MONDAY, override)

        assert not schedule.closed
        assert schedule.lunch is None
        assert schedule.dinner == DINNER

    def test_both_shifts_closed_means_closed_day(self):
        override = SpecialDayOverride(
            date=MONDAY, is_closed=False, lunch_closed=True, dinner_closed=True
        )

        assert resolve_day(OPEN_MONDAY, override) == CLOSED_DAY


class TestScheduleStore:
    """Storage of the template and overrides."""

    def test_empty_database_uses_default_template(self, db):
        template = ScheduleStore(db).weekly_template()

        assert template == DEFAULT_WEEKLY_TEMPLATE
        assert not template[0].is_open
        assert all(entry.is_open for entry in template[1:])

    def test_replace_weekly_template(self, db):
        store = ScheduleStore(db)
        entries = [
            WeeklyScheduleEntry(weekday=d, is_open=d in (5, 6), lunch=LUNCH, dinner=DINNER)
            for d in range(7)
        ]

        store.replace_weekly_template(entries)

        assert [e.is_open for e in store.weekly_template()] == [
            False, False, False, False, False, True, True,
        ]
        assert db.query(WeeklySchedule).count() == 7

    def test_replace_rejects_incomplete_template(self, db):
        entries = [
            WeeklyScheduleEntry(weekday=d, is_open=True, lunch=LUNCH, dinner=DINNER)
            for d in range(6)
        ]

        with pytest.raises(ValueError, match="one entry per weekday"):
            ScheduleStore(db).replace_weekly_template(entries)

    def test_replace_rejects_inverted_window(self, db):
        inverted = TimeWindow(time(16, 0), time(13, 0))
        entries = [
            WeeklyScheduleEntry(weekday=d, is_open=True, lunch=inverted if d == 3 else LUNCH, dinner=DINNER)
            for d in range(7)
        ]

        with pytest.raises(ValueError, match="Weekday 3"):
            ScheduleStore(db).replace_weekly_template(entries)

    def test_malformed_weekly_row_falls_back_to_default(self, db):
        db.add(WeeklySchedule(
            weekday=2, is_open=1,
            lunch_start="25:99", lunch_end="15:30",
            dinner_start="20:00", dinner_end="23:00",
            updated_at="2099-01-01 00:00:00",
        ))
        db.commit()

        assert ScheduleStore(db).weekly_entry(2) == DEFAULT_WEEKLY_TEMPLATE[2]

    def test_upsert_replaces_existing_override(self, db):
        store = ScheduleStore(db)
        store.upsert_special_day(SpecialDayOverride(date=MONDAY, is_closed=True, note="Inventario"))
        store.upsert_special_day(SpecialDayOverride(date=MONDAY, is_closed=False, dinner_closed=True))

        assert db.query(SpecialDays).count() == 1
        override = store.special_day(MONDAY)
        assert not override.is_closed
        assert override.dinner_closed
        assert override.note is None

    def test_list_special_days_from_date(self, db):
        store = ScheduleStore(db)
        for day in (date(2099, 1, 1), date(2099, 2, 1), date(2099, 3, 1)):
            store.upsert_special_day(SpecialDayOverride(date=day, is_closed=True))

        dates = [row.date for row in store.list_special_days(from_date=date(2099, 2, 1))]

        assert dates == ["2099-02-01", "2099-03-01"]

    def test_delete_special_day(self, db):
        store = ScheduleStore(db)
        store.upsert_special_day(SpecialDayOverride(date=MONDAY, is_closed=True))

        assert store.delete_special_day(MONDAY) is True
        assert store.delete_special_day(MONDAY) is False
        assert store.special_day(MONDAY) is None


class TestScheduleResolver:
    """Resolution for a date against stored data."""

    def test_sunday_closed_by_default(self, db):
        assert ScheduleResolver(ScheduleStore(db)).resolve(SUNDAY).closed

    def test_override_closes_open_day(self, db):
        ScheduleStore(db).upsert_special_day(SpecialDayOverride(date=MONDAY, is_closed=True))

        assert ScheduleResolver(ScheduleStore(db)).resolve(MONDAY) == CLOSED_DAY

    def test_malformed_override_is_ignored(self, db):
        db.add(SpecialDays(
            date=MONDAY.isoformat(), is_closed=0, lunch_closed=0, dinner_closed=0,
            lunch_start="13:00", lunch_end=None,
            created_at="2099-01-01 00:00:00", updated_at="2099-01-01 00:00:00",
        ))
        db.commit()

        schedule = ScheduleResolver(ScheduleStore(db)).resolve(MONDAY)

        assert not schedule.closed
        assert schedule.lunch == LUNCH
        assert schedule.dinner == DINNER
