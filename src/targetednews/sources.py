"""Source registry — the feeds configured per region."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from targetednews.storage.connection import get_connection

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "Unknown Source"


@dataclass(frozen=True)
class Source:
    """One external feed or API endpoint supplying articles for a region."""

    id: int
    region_code: str
    url: str
    name: str
    adapter: str = "rss"
    is_active: bool = True
    created_at: str | None = None


def _row_to_source(row: sqlite3.Row) -> Source:
    return Source(
        id=row["id"],
        region_code=row["region_code"],
        url=row["url"],
        name=row["name"],
        adapter=row["adapter"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


def region_exists(database_path: str, region_code: str) -> bool:
    with get_connection(database_path) as conn:
        row = conn.execute(
            "SELECT 1 FROM regions WHERE code = ?", (region_code,)
        ).fetchone()
    return row is not None


def add_source(
    database_path: str,
    region_code: str,
    url: str,
    name: str | None = None,
    adapter: str = "rss",
) -> int | None:
    """Register a source for a region.

    Adding the same url for the same region twice is a no-op. Returns the new
    row id, or None when the source already existed. Raises ValueError if the
    region code is unknown.
    """
    if not region_exists(database_path, region_code):
        raise ValueError(f"Unknown region code '{region_code}'")

    with get_connection(database_path) as conn:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO sources (region_code, url, name, adapter) "
            "VALUES (?, ?, ?, ?)",
            (region_code, url, name or DEFAULT_SOURCE_NAME, adapter),
        )
        if cursor.rowcount == 0:
            logger.info("Source %s already registered for %s", url, region_code)
            return None
        source_id = cursor.lastrowid

    logger.info("Added source %s (%s) for %s", name or DEFAULT_SOURCE_NAME, url, region_code)
    return source_id


def delete_source(database_path: str, source_id: int) -> bool:
    """Delete a source by id. Returns False when no such source exists."""
    with get_connection(database_path) as conn:
        cursor = conn.execute("DELETE FROM sources WHERE id = ?", (source_id,))
        deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Deleted source %d", source_id)
    return deleted


def list_sources(database_path: str) -> list[dict]:
    """Return every source joined with its region, ordered by region then name."""
    with get_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT s.id, s.region_code, s.url, s.name, s.adapter, s.is_active, "
            "s.created_at, r.name AS region_name, r.flag_emoji "
            "FROM sources s "
            "JOIN regions r ON s.region_code = r.code "
            "ORDER BY r.name, s.name"
        ).fetchall()
    return [
        {
            "id": row["id"],
            "region_code": row["region_code"],
            "url": row["url"],
            "name": row["name"],
            "adapter": row["adapter"],
            "is_active": bool(row["is_active"]),
            "created_at": row["created_at"],
            "region_name": row["region_name"],
            "flag_emoji": row["flag_emoji"],
        }
        for row in rows
    ]


def list_active_sources(database_path: str) -> list[Source]:
    """Return the active sources whose region exists, in insertion order."""
    with get_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT s.id, s.region_code, s.url, s.name, s.adapter, s.is_active, s.created_at "
            "FROM sources s "
            "JOIN regions r ON s.region_code = r.code "
            "WHERE s.is_active = 1 "
            "ORDER BY s.id"
        ).fetchall()
    return [_row_to_source(row) for row in rows]


def seed_sources(database_path: str, seed_path: str | Path) -> int:
    """Register sources listed in a JSON file. Returns the number newly added.

    Expected format:
    {
        "sources": [
            {"region_code": "kenya", "url": "...", "name": "...", "adapter": "rss"},
            ...
        ]
    }

    Entries for unknown regions are logged and skipped.
    """
    with open(seed_path) as f:
        data = json.load(f)

    added = 0
    for entry in data.get("sources", []):
        try:
            source_id = add_source(
                database_path,
                entry["region_code"],
                entry["url"],
                entry.get("name"),
                entry.get("adapter", "rss"),
            )
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping seed source %s: %s", entry, exc)
            continue
        if source_id is not None:
            added += 1

    logger.info("Seeded %d new source(s) from %s", added, seed_path)
    return added
