"""Tests for targetednews.ingestion.normalize — field fallbacks and truncation."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from targetednews.ingestion.normalize import (
    DESCRIPTION_MAX_LENGTH,
    FALLBACK_DESCRIPTION,
    FALLBACK_TITLE,
    TITLE_MAX_LENGTH,
    Article,
    RawItem,
    normalize,
)
from targetednews.sources import Source

SOURCE = Source(id=7, region_code="kenya", url="https://example.com/feed", name="Example")
NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def _raw(**overrides) -> RawItem:
    defaults = {
        "title": "Headline",
        "link": "https://example.com/a",
        "description": "Body",
        "pub_date": "2025-06-15T10:00:00+00:00",
    }
    defaults.update(overrides)
    return RawItem(**defaults)


class TestCarriesSource:
    def test_source_fields(self):
        article = normalize(_raw(), SOURCE, now=NOW)
        assert isinstance(article, Article)
        assert article.source_id == 7
        assert article.region_code == "kenya"


class TestTitle:
    def test_uses_title(self):
        assert normalize(_raw(), SOURCE, now=NOW).title == "Headline"

    @pytest.mark.parametrize("title", [None, ""])
    def test_missing_title_falls_back(self, title):
        assert normalize(_raw(title=title), SOURCE, now=NOW).title == FALLBACK_TITLE

    def test_truncated_to_bound(self):
        article = normalize(_raw(title="x" * 800), SOURCE, now=NOW)
        assert len(article.title) == TITLE_MAX_LENGTH == 500

    def test_short_title_untouched(self):
        title = "y" * TITLE_MAX_LENGTH
        assert normalize(_raw(title=title), SOURCE, now=NOW).title == title


class TestDescription:
    def test_prefers_description(self):
        raw = _raw(description="desc", content="content", encoded_content="encoded")
        assert normalize(raw, SOURCE, now=NOW).description == "desc"

    def test_falls_back_to_content(self):
        raw = _raw(description=None, content="content", encoded_content="encoded")
        assert normalize(raw, SOURCE, now=NOW).description == "content"

    def test_falls_back_to_encoded_content(self):
        raw = _raw(description="", content=None, encoded_content="encoded")
        assert normalize(raw, SOURCE, now=NOW).description == "encoded"

    def test_falls_back_to_literal(self):
        raw = _raw(description=None)
        assert normalize(raw, SOURCE, now=NOW).description == FALLBACK_DESCRIPTION

    def test_truncated_to_bound(self):
        article = normalize(_raw(description="d" * 5000), SOURCE, now=NOW)
        assert len(article.description) == DESCRIPTION_MAX_LENGTH == 1000


class TestLink:
    def test_uses_link(self):
        assert normalize(_raw(), SOURCE, now=NOW).link == "https://example.com/a"

    def test_missing_link_is_empty_string(self):
        assert normalize(_raw(link=None), SOURCE, now=NOW).link == ""


class TestPubDate:
    def test_rfc822_pub_date_converted(self):
        raw = _raw(pub_date="Sun, 15 Jun 2025 10:00:00 GMT")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "2025-06-15T10:00:00+00:00"

    def test_pub_date_preferred_over_iso_date(self):
        raw = _raw(pub_date="2025-06-15T10:00:00+00:00", iso_date="2020-01-01T00:00:00+00:00")
        assert normalize(raw, SOURCE, now=NOW).pub_date.startswith("2025-06-15")

    def test_falls_back_to_iso_date(self):
        raw = _raw(pub_date=None, iso_date="2025-06-14T08:30:00Z")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "2025-06-14T08:30:00+00:00"

    def test_falls_back_to_now(self):
        raw = _raw(pub_date=None, iso_date=None)
        assert normalize(raw, SOURCE, now=NOW).pub_date == NOW.isoformat()

    def test_falls_back_to_wall_clock(self):
        before = datetime.now(timezone.utc)
        article = normalize(_raw(pub_date=None), SOURCE)
        assert datetime.fromisoformat(article.pub_date) >= before

    def test_offset_converted_to_utc(self):
        raw = _raw(pub_date="Sun, 15 Jun 2025 12:00:00 +0300")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "2025-06-15T09:00:00+00:00"

    def test_iso_offset_converted_to_utc(self):
        raw = _raw(pub_date=None, iso_date="2025-06-15T12:00:00+03:00")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "2025-06-15T09:00:00+00:00"

    def test_naive_date_taken_as_utc(self):
        raw = _raw(pub_date="2025-06-15T10:00:00")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "2025-06-15T10:00:00+00:00"

    def test_unparseable_date_kept_verbatim(self):
        raw = _raw(pub_date="sometime last week")
        assert normalize(raw, SOURCE, now=NOW).pub_date == "sometime last week"
