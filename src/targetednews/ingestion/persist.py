"""Persistence — idempotent batch insert of Articles keyed on link uniqueness."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from targetednews.ingestion.normalize import Article
from targetednews.storage.connection import get_connection

logger = logging.getLogger(__name__)

_INSERT_SQL = (
    "INSERT OR IGNORE INTO articles "
    "(source_id, region_code, title, description, link, pub_date) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one save_articles call."""

    attempted: int = 0
    inserted: int = 0
    ignored: int = 0  # link already stored
    failed: int = 0


def save_articles(articles: list[Article], database_path: str) -> BatchResult:
    """Insert articles, silently skipping links that are already stored.

    Each row is resolved independently: a storage error on one article is
    counted and the rest of the batch continues. A non-zero failure count is
    logged, never raised. Returns once the batch is committed.
    """
    if not articles:
        return BatchResult()

    inserted = 0
    ignored = 0
    failed = 0

    with get_connection(database_path) as conn:
        for article in articles:
            try:
                cursor = conn.execute(
                    _INSERT_SQL,
                    (
                        article.source_id,
                        article.region_code,
                        article.title,
                        article.description,
                        article.link,
                        article.pub_date,
                    ),
                )
            except sqlite3.Error as exc:
                failed += 1
                logger.debug("Error saving article %s: %s", article.link, exc)
                continue
            if cursor.rowcount:
                inserted += 1
            else:
                ignored += 1

    if failed:
        logger.warning("%d of %d articles had errors saving", failed, len(articles))

    return BatchResult(
        attempted=len(articles), inserted=inserted, ignored=ignored, failed=failed
    )
