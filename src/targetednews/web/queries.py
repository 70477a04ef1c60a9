"""Read-only query functions for the web API."""

from __future__ import annotations

from targetednews.web.deps import get_readonly_connection

ARTICLES_PER_REGION = 50


def list_regions(database_path: str) -> list[dict]:
    """Return all regions ordered by display name."""
    with get_readonly_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT id, name, code, flag_emoji, created_at FROM regions ORDER BY name"
        ).fetchall()
    return [dict(row) for row in rows]


def list_regions_with_counts(database_path: str) -> list[dict]:
    """Return all regions with the number of stored articles for each."""
    with get_readonly_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT r.id, r.name, r.code, r.flag_emoji, r.created_at, "
            "COUNT(a.id) AS article_count "
            "FROM regions r "
            "LEFT JOIN articles a ON r.code = a.region_code "
            "GROUP BY r.id "
            "ORDER BY r.name"
        ).fetchall()
    return [dict(row) for row in rows]


def list_region_articles(
    database_path: str, region_code: str, limit: int = ARTICLES_PER_REGION
) -> list[dict]:
    """Return the newest articles for a region, most recent publication first.

    Articles whose source has since been deleted keep a null source_name.
    """
    with get_readonly_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT a.id, a.source_id, a.region_code, a.title, a.description, "
            "a.link, a.pub_date, a.created_at, s.name AS source_name "
            "FROM articles a "
            "LEFT JOIN sources s ON a.source_id = s.id "
            "WHERE a.region_code = ? "
            "ORDER BY a.pub_date DESC "
            "LIMIT ?",
            (region_code, limit),
        ).fetchall()
    return [dict(row) for row in rows]


def list_fetch_runs(database_path: str, limit: int = 20) -> list[dict]:
    """Return the most recent ingestion runs, newest first."""
    with get_readonly_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT id, started_at, finished_at, status, articles_processed, "
            "articles_inserted, sources_failed, error "
            "FROM fetch_runs "
            "ORDER BY started_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [dict(row) for row in rows]
