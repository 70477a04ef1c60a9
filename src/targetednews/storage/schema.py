"""Database schema definition and initialization."""

from __future__ import annotations

import logging
import sqlite3

from targetednews.storage.connection import get_connection

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
-- Regions (countries) that articles are grouped by
CREATE TABLE IF NOT EXISTS regions (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    code        TEXT NOT NULL UNIQUE,
    flag_emoji  TEXT,
    created_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- External feeds configured per region
CREATE TABLE IF NOT EXISTS sources (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    region_code TEXT NOT NULL REFERENCES regions(code),
    url         TEXT NOT NULL,
    name        TEXT NOT NULL DEFAULT 'Unknown Source',
    adapter     TEXT NOT NULL DEFAULT 'rss',
    is_active   INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (region_code, url)
);

-- Canonical articles; source_id is a weak back-reference (no FK)
CREATE TABLE IF NOT EXISTS articles (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id   INTEGER,
    region_code TEXT NOT NULL,
    title       TEXT NOT NULL,
    description TEXT,
    link        TEXT UNIQUE,
    pub_date    TEXT,
    created_at  TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- One row per ingestion run
CREATE TABLE IF NOT EXISTS fetch_runs (
    id                  TEXT PRIMARY KEY,
    started_at          TEXT NOT NULL,
    finished_at         TEXT NOT NULL,
    status              TEXT NOT NULL CHECK (status IN ('success', 'error', 'skipped')),
    articles_processed  INTEGER NOT NULL DEFAULT 0,
    articles_inserted   INTEGER NOT NULL DEFAULT 0,
    sources_failed      INTEGER NOT NULL DEFAULT 0,
    error               TEXT
);

-- Consecutive fetch failures per source
CREATE TABLE IF NOT EXISTS source_errors (
    source_id               INTEGER PRIMARY KEY,
    consecutive_failures    INTEGER NOT NULL DEFAULT 0,
    last_error              TEXT,
    last_failed_at          TEXT,
    last_succeeded_at       TEXT
);

-- Indexes: articles
CREATE INDEX IF NOT EXISTS idx_articles_region_pub_date ON articles(region_code, pub_date);
CREATE INDEX IF NOT EXISTS idx_articles_source_id ON articles(source_id);

-- Indexes: sources
CREATE INDEX IF NOT EXISTS idx_sources_region_code ON sources(region_code);

-- Indexes: fetch_runs
CREATE INDEX IF NOT EXISTS idx_fetch_runs_started_at ON fetch_runs(started_at);
"""

SEED_REGIONS: list[tuple[str, str, str]] = [
    ("Eritrea", "eritrea", "\U0001F1EA\U0001F1F7"),
    ("Somalia", "somalia", "\U0001F1F8\U0001F1F4"),
    ("Sudan", "sudan", "\U0001F1F8\U0001F1E9"),
    ("Kenya", "kenya", "\U0001F1F0\U0001F1EA"),
    ("Egypt", "egypt", "\U0001F1EA\U0001F1EC"),
]


def _migrate_sources_add_adapter(conn: sqlite3.Connection) -> None:
    """Add the adapter column to sources tables created before NewsAPI support."""
    try:
        conn.execute("ALTER TABLE sources ADD COLUMN adapter TEXT NOT NULL DEFAULT 'rss'")
    except sqlite3.OperationalError:
        pass  # Column already exists


def _seed_regions(conn: sqlite3.Connection) -> None:
    """Insert the static region rows. Existing codes are left untouched."""
    for name, code, flag in SEED_REGIONS:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO regions (name, code, flag_emoji) VALUES (?, ?, ?)",
            (name, code, flag),
        )
        if cursor.rowcount:
            logger.info("Added region %s", name)


def init_db(database_path: str) -> None:
    """Create all tables and indexes if they do not already exist, then seed regions."""
    with get_connection(database_path) as conn:
        conn.executescript(_SCHEMA_SQL)
        _migrate_sources_add_adapter(conn)
        _seed_regions(conn)
    logger.info("Database initialized at %s", database_path)
