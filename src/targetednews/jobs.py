"""Scheduled job functions — news ingestion and refresh notification."""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import targetednews.ingestion  # noqa: F401  (registers adapters)
from targetednews.config import Config
from targetednews.ingestion.adapter import FeedAdapter
from targetednews.ingestion.errors import OrchestratorFailure
from targetednews.ingestion.normalize import normalize
from targetednews.ingestion.persist import save_articles
from targetednews.ingestion.registry import build_adapters
from targetednews.notify import Broadcaster
from targetednews.sources import list_active_sources
from targetednews.storage.connection import get_connection

logger = logging.getLogger(__name__)

NEWS_UPDATED_EVENT = "news_updated"


@dataclass(frozen=True)
class IngestionResult:
    """Totals for one ingestion run.

    ``processed`` counts every article handed to the store, duplicates
    included. ``inserted`` counts rows that were actually new.
    """

    processed: int = 0
    inserted: int = 0
    sources_total: int = 0
    sources_failed: int = 0


class SingleFlight:
    """Allow at most one holder at a time; later callers are turned away, not queued."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()


class RefreshInProgress(Exception):
    """A refresh was requested while another run still held the guard."""


def _record_run(
    database_path: str,
    started_at: str,
    status: str,
    result: IngestionResult | None = None,
    error: str | None = None,
) -> None:
    """Insert a row into the fetch_runs table."""
    result = result or IngestionResult()
    finished_at = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO fetch_runs "
            "(id, started_at, finished_at, status, articles_processed, "
            "articles_inserted, sources_failed, error) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                str(uuid.uuid4()),
                started_at,
                finished_at,
                status,
                result.processed,
                result.inserted,
                result.sources_failed,
                error,
            ),
        )


def _record_source_failure(database_path: str, source_id: int, error_msg: str) -> int:
    """Record a source fetch failure. Returns updated consecutive_failures count."""
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO source_errors "
            "(source_id, consecutive_failures, last_error, last_failed_at) "
            "VALUES (?, 1, ?, ?) "
            "ON CONFLICT(source_id) DO UPDATE SET "
            "consecutive_failures = consecutive_failures + 1, "
            "last_error = excluded.last_error, last_failed_at = excluded.last_failed_at",
            (source_id, error_msg, now),
        )
        row = conn.execute(
            "SELECT consecutive_failures FROM source_errors WHERE source_id = ?",
            (source_id,),
        ).fetchone()
    return row["consecutive_failures"] if row else 1


def _record_source_success(database_path: str, source_id: int) -> None:
    """Reset the consecutive failure count for a source after a successful fetch."""
    now = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO source_errors (source_id, consecutive_failures, last_succeeded_at) "
            "VALUES (?, 0, ?) "
            "ON CONFLICT(source_id) DO UPDATE SET "
            "consecutive_failures = 0, last_succeeded_at = excluded.last_succeeded_at",
            (source_id, now),
        )


def run_ingestion(database_path: str, adapters: dict[str, FeedAdapter]) -> IngestionResult:
    """Fetch, normalize and store articles from every active source.

    Sources are processed one after another. Any failure inside a single
    source is logged and counted, and the run moves on to the next source.
    Raises OrchestratorFailure only if the source registry cannot be read.
    """
    try:
        sources = list_active_sources(database_path)
    except sqlite3.Error as exc:
        raise OrchestratorFailure(f"Could not load source registry: {exc}") from exc

    logger.info("Starting news fetch from %d source(s)", len(sources))
    processed = 0
    inserted = 0
    failed = 0

    for source in sources:
        adapter = adapters.get(source.adapter)
        if adapter is None:
            logger.warning(
                "Unknown adapter type '%s' for source %s, skipping", source.adapter, source.name
            )
            failed += 1
            continue

        logger.info("Fetching from %s (%s)", source.name, source.region_code)
        try:
            raw_items = adapter.fetch(source)
            now = datetime.now(timezone.utc)
            articles = [normalize(raw, source, now=now) for raw in raw_items]
            batch = save_articles(articles, database_path)
        except Exception as exc:
            logger.warning("Failed to fetch from %s: %s", source.name, exc)
            failed += 1
            try:
                _record_source_failure(database_path, source.id, str(exc))
            except sqlite3.Error:
                logger.exception("Could not record failure for source %s", source.id)
            continue

        try:
            _record_source_success(database_path, source.id)
        except sqlite3.Error:
            logger.exception("Could not record success for source %s", source.id)
        processed += batch.attempted
        inserted += batch.inserted
        logger.info(
            "Stored %d new of %d articles from %s", batch.inserted, batch.attempted, source.name
        )

    logger.info(
        "News fetch completed: %d processed, %d new, %d source(s) failed",
        processed, inserted, failed,
    )
    return IngestionResult(
        processed=processed,
        inserted=inserted,
        sources_total=len(sources),
        sources_failed=failed,
    )


def build_event(result: IngestionResult, message: str | None = None) -> dict:
    """Build the payload published to subscribers after a completed run."""
    return {
        "event": NEWS_UPDATED_EVENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": message or f"Auto-refresh: {result.processed} new articles processed",
        "count": result.processed,
        "inserted": result.inserted,
    }


def _run_and_record(
    config: Config, adapters: dict[str, FeedAdapter] | None, started_at: str
) -> IngestionResult:
    """Run the orchestrator and write its fetch_runs row, success or error."""
    if adapters is None:
        adapters = build_adapters(config)
    try:
        result = run_ingestion(config.database_path, adapters)
    except Exception as exc:
        _record_run(config.database_path, started_at, "error", error=str(exc))
        raise
    _record_run(config.database_path, started_at, "success", result)
    return result


def refresh_news(
    config: Config,
    broadcaster: Broadcaster,
    guard: SingleFlight,
    adapters: dict[str, FeedAdapter] | None = None,
) -> IngestionResult | None:
    """Scheduled refresh: run one guarded ingestion and notify subscribers.

    Returns the run's result, or None if the run was skipped because another
    was still in progress or if it failed. A failed run publishes nothing;
    the next scheduled tick is the retry.
    """
    started_at = datetime.now(timezone.utc).isoformat()

    if not guard.try_acquire():
        logger.warning("Previous news refresh still running; skipping this run")
        _record_run(config.database_path, started_at, "skipped")
        return None

    logger.info("Auto-refreshing news...")
    try:
        result = _run_and_record(config, adapters, started_at)
    except Exception:
        logger.exception("Auto-refresh failed")
        return None
    finally:
        guard.release()

    delivered = broadcaster.publish(build_event(result))
    logger.info(
        "Auto-refresh completed: %d articles (notified %d subscriber(s))",
        result.processed, delivered,
    )
    return result


def refresh_news_now(
    config: Config,
    broadcaster: Broadcaster,
    guard: SingleFlight,
    adapters: dict[str, FeedAdapter] | None = None,
) -> IngestionResult:
    """On-demand refresh for the API.

    Raises RefreshInProgress if another run holds the guard, and lets
    OrchestratorFailure propagate to the caller.
    """
    if not guard.try_acquire():
        raise RefreshInProgress("A news refresh is already running")

    started_at = datetime.now(timezone.utc).isoformat()
    try:
        result = _run_and_record(config, adapters, started_at)
    finally:
        guard.release()

    broadcaster.publish(
        build_event(result, f"Manual refresh: {result.processed} new articles processed")
    )
    return result
