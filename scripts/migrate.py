"""
Apply SQL migrations from backend/migrations to the SQLite database.

Usage: python scripts/migrate.py
Applied versions are recorded in schema_migrations.
"""

import glob
import logging
import os
import sqlite3
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR / "backend"))

from tablebook.config import settings  # noqa: E402

MIGRATIONS_DIR = BASE_DIR / "backend" / "migrations"

logger = logging.getLogger("migrate")


def sqlite_path(database_url: str) -> Path:
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        raise RuntimeError("migrate.py supports only sqlite DATABASE_URL")
    return Path(database_url[len(prefix):])


def apply_migrations(db_path: Path) -> int:
    """Apply pending migrations. Returns the number applied."""
    logger.info(f"Using DB: {db_path}")
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                applied_at TEXT DEFAULT CURRENT_TIMESTAMP
            );
        """)
        cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations;")
        current_version = cur.fetchone()[0]
        logger.info(f"Current schema version: {current_version}")

        applied = 0
        for path in sorted(glob.glob(os.path.join(MIGRATIONS_DIR, "*.sql"))):
            filename = os.path.basename(path)
            version = int(filename.split("_")[0])
            if version <= current_version:
                continue

            logger.info(f"Applying migration {filename}...")
            with open(path, "r", encoding="utf-8") as f:
                sql = f.read()

            cur.executescript(sql)
            cur.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
            conn.commit()
            applied += 1
            logger.info(f"Applied {filename}")
    finally:
        conn.close()

    logger.info("All migrations applied.")
    return applied


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    apply_migrations(sqlite_path(settings.resolved_database_url))
