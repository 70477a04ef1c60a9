"""RSS/Atom feed adapter."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from html import unescape

import feedparser
import httpx

from targetednews.ingestion.adapter import FeedAdapter
from targetednews.ingestion.errors import SourceUnavailable
from targetednews.ingestion.normalize import RawItem
from targetednews.sources import Source

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Remove HTML tags and unescape entities."""
    return unescape(_HTML_TAG_RE.sub("", text)).strip()


def _text(value: str | None) -> str | None:
    if not value:
        return None
    return strip_html(value) or None


def _iso_date(entry: dict) -> str | None:
    """Build an ISO 8601 date from feedparser's parsed time tuple, if any."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return datetime(*parsed[:6], tzinfo=timezone.utc).isoformat()
    except (ValueError, TypeError):
        return None


def _split_content(entry: dict) -> tuple[str | None, str | None]:
    """Return (plain content, embedded HTML content) from an entry's content blocks.

    feedparser puts both Atom <content> and RSS content:encoded into
    entry.content; plain-text blocks are treated as content, everything else
    as embedded content.
    """
    content = None
    encoded = None
    for block in entry.get("content") or []:
        value = _text(block.get("value"))
        if value is None:
            continue
        if block.get("type") == "text/plain":
            content = content or value
        else:
            encoded = encoded or value
    return content, encoded


def entry_to_raw_item(entry: dict) -> RawItem:
    """Map one feedparser entry onto the RawItem shape."""
    content, encoded = _split_content(entry)
    title = (entry.get("title") or "").strip()
    return RawItem(
        title=title or None,
        link=entry.get("link") or None,
        description=_text(entry.get("summary") or entry.get("description")),
        content=content,
        encoded_content=encoded,
        pub_date=entry.get("published") or entry.get("updated") or None,
        iso_date=_iso_date(entry),
    )


class RSSAdapter(FeedAdapter):
    """Adapter for RSS, RDF and Atom feeds."""

    @property
    def name(self) -> str:
        return "rss"

    def fetch(self, source: Source) -> list[RawItem]:
        try:
            response = httpx.get(source.url, timeout=self._timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceUnavailable(source.name, f"HTTP error fetching {source.url}: {exc}") from exc

        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            raise SourceUnavailable(
                source.name, f"Malformed feed at {source.url}: {feed.get('bozo_exception')}"
            )

        items = [entry_to_raw_item(entry) for entry in feed.entries]
        logger.info("Found %d articles from %s", len(items), source.name)
        return items
