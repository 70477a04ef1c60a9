"""Tests for targetednews.sources — the source registry."""

from __future__ import annotations

import json

import pytest

from targetednews.sources import (
    DEFAULT_SOURCE_NAME,
    add_source,
    delete_source,
    list_active_sources,
    list_sources,
    region_exists,
    seed_sources,
)
from targetednews.storage.connection import get_connection
from targetednews.storage.schema import init_db


@pytest.fixture()
def db_path(tmp_path):
    path = str(tmp_path / "test.db")
    init_db(path)
    return path


class TestAddSource:
    def test_returns_new_id(self, db_path):
        source_id = add_source(db_path, "kenya", "https://example.com/feed", "Example")
        assert isinstance(source_id, int)

    def test_duplicate_is_noop(self, db_path):
        add_source(db_path, "kenya", "https://example.com/feed", "Example")
        assert add_source(db_path, "kenya", "https://example.com/feed", "Again") is None
        assert len(list_sources(db_path)) == 1

    def test_same_url_different_region_allowed(self, db_path):
        add_source(db_path, "kenya", "https://example.com/feed")
        assert add_source(db_path, "sudan", "https://example.com/feed") is not None

    def test_default_name(self, db_path):
        add_source(db_path, "kenya", "https://example.com/feed")
        assert list_sources(db_path)[0]["name"] == DEFAULT_SOURCE_NAME

    def test_unknown_region_raises(self, db_path):
        with pytest.raises(ValueError, match="atlantis"):
            add_source(db_path, "atlantis", "https://example.com/feed")

    def test_region_exists(self, db_path):
        assert region_exists(db_path, "egypt")
        assert not region_exists(db_path, "atlantis")


class TestListSources:
    def test_joins_region(self, db_path):
        add_source(db_path, "kenya", "https://example.com/feed", "Example")
        row = list_sources(db_path)[0]
        assert row["region_name"] == "Kenya"
        assert row["flag_emoji"]
        assert row["adapter"] == "rss"
        assert row["is_active"] is True

    def test_ordered_by_region_then_name(self, db_path):
        add_source(db_path, "sudan", "https://example.com/s", "Sudan B")
        add_source(db_path, "egypt", "https://example.com/e", "Egypt A")
        add_source(db_path, "kenya", "https://example.com/k2", "Zeta")
        add_source(db_path, "kenya", "https://example.com/k1", "Alpha")
        names = [row["name"] for row in list_sources(db_path)]
        assert names == ["Egypt A", "Alpha", "Zeta", "Sudan B"]

    def test_active_sources_excludes_inactive(self, db_path):
        active_id = add_source(db_path, "kenya", "https://example.com/a", "Active")
        inactive_id = add_source(db_path, "kenya", "https://example.com/b", "Inactive")
        with get_connection(db_path) as conn:
            conn.execute("UPDATE sources SET is_active = 0 WHERE id = ?", (inactive_id,))

        sources = list_active_sources(db_path)
        assert [s.id for s in sources] == [active_id]
        assert sources[0].region_code == "kenya"
        assert sources[0].is_active is True


class TestDeleteSource:
    def test_deletes(self, db_path):
        source_id = add_source(db_path, "kenya", "https://example.com/feed")
        assert delete_source(db_path, source_id) is True
        assert list_sources(db_path) == []

    def test_missing_returns_false(self, db_path):
        assert delete_source(db_path, 12345) is False


class TestSeedSources:
    def test_seeds_and_skips_bad_entries(self, db_path, tmp_path):
        seed_path = tmp_path / "sources.json"
        seed_path.write_text(json.dumps({
            "sources": [
                {"region_code": "kenya", "url": "https://example.com/k", "name": "K"},
                {"region_code": "egypt", "url": "https://example.com/e", "adapter": "newsapi"},
                {"region_code": "atlantis", "url": "https://example.com/x"},
                {"url": "https://example.com/no-region"},
            ]
        }))

        assert seed_sources(db_path, seed_path) == 2
        adapters = {row["url"]: row["adapter"] for row in list_sources(db_path)}
        assert adapters == {
            "https://example.com/k": "rss",
            "https://example.com/e": "newsapi",
        }

    def test_reseeding_adds_nothing(self, db_path, tmp_path):
        seed_path = tmp_path / "sources.json"
        seed_path.write_text(json.dumps({
            "sources": [{"region_code": "kenya", "url": "https://example.com/k"}]
        }))
        seed_sources(db_path, seed_path)
        assert seed_sources(db_path, seed_path) == 0
