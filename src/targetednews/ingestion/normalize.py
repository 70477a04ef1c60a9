"""Normalization — map raw adapter items onto the canonical Article record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from targetednews.sources import Source

TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 1000

FALLBACK_TITLE = "No title available"
FALLBACK_DESCRIPTION = "No description available"


@dataclass(frozen=True)
class RawItem:
    """Item emitted by any fetch adapter. Every field may be missing."""

    title: str | None = None
    link: str | None = None
    description: str | None = None
    content: str | None = None
    encoded_content: str | None = None
    pub_date: str | None = None
    iso_date: str | None = None


@dataclass(frozen=True)
class Article:
    """Canonical, store-ready article. Not yet persisted."""

    source_id: int | None
    region_code: str
    title: str
    description: str
    link: str
    pub_date: str


def _first(*values: str | None) -> str | None:
    """Return the first value that is a non-empty string."""
    for value in values:
        if value:
            return value
    return None


def _as_utc(parsed: datetime) -> str:
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def _to_iso(value: str) -> str:
    """Convert an RFC 822 or ISO 8601 date string to ISO 8601 in UTC.

    Stored dates share one offset so they sort correctly as text. Naive
    values are taken as UTC. Unparseable strings are returned unchanged so
    no article is dropped over a date it cannot read.
    """
    try:
        return _as_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError):
        pass
    try:
        return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return value


def normalize(raw: RawItem, source: Source, now: datetime | None = None) -> Article:
    """Transform a RawItem from ``source`` into an Article.

    Applies the field fallbacks (title, then description/content/encoded
    content, then link, then pub_date/iso_date/now) and truncates title and
    description to their maximum stored lengths.
    """
    title = _first(raw.title) or FALLBACK_TITLE
    description = (
        _first(raw.description, raw.content, raw.encoded_content) or FALLBACK_DESCRIPTION
    )
    link = raw.link or ""

    date_value = _first(raw.pub_date, raw.iso_date)
    if date_value is not None:
        pub_date = _to_iso(date_value)
    else:
        pub_date = _as_utc(now or datetime.now(timezone.utc))

    return Article(
        source_id=source.id,
        region_code=source.region_code,
        title=title[:TITLE_MAX_LENGTH],
        description=description[:DESCRIPTION_MAX_LENGTH],
        link=link,
        pub_date=pub_date,
    )
