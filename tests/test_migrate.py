"""The SQL migration runner against an empty database."""

import importlib.util
import sqlite3
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "migrate.py"


@pytest.fixture
def migrate():
    module_spec = importlib.util.spec_from_file_location("migrate_script", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_applies_once_and_seeds_weekly_template(migrate, tmp_path):
    db_path = tmp_path / "nested" / "reservations.db"

    assert migrate.apply_migrations(db_path) == 1
    assert migrate.apply_migrations(db_path) == 0

    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT weekday, is_open FROM weekly_schedule ORDER BY weekday").fetchall()
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    finally:
        conn.close()

    assert rows == [(0, 0), (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (6, 1)]
    assert {"special_days", "reservations", "slot_occupancy", "venue_settings"} <= tables


def test_rejects_non_sqlite_url(migrate):
    with pytest.raises(RuntimeError):
        migrate.sqlite_path("postgresql://localhost/tablebook")
