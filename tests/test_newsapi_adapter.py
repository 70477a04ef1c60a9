"""Tests for targetednews.ingestion.newsapi_adapter — JSON news API adapter."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from targetednews.ingestion.errors import SourceUnavailable
from targetednews.ingestion.newsapi_adapter import NewsAPIAdapter, article_to_raw_item
from targetednews.ingestion.normalize import FALLBACK_TITLE, normalize
from targetednews.sources import Source

SOURCE = Source(
    id=3,
    region_code="egypt",
    url="https://newsapi.org/v2/everything?q=Egypt",
    name="NewsAPI Egypt",
    adapter="newsapi",
)

SAMPLE_PAYLOAD = {
    "status": "ok",
    "totalResults": 2,
    "articles": [
        {
            "source": {"id": None, "name": "Example Wire"},
            "title": "Cairo headline",
            "description": "What happened in Cairo.",
            "url": "https://example.com/cairo",
            "publishedAt": "2025-06-15T09:00:00Z",
            "content": "Full text…",
        },
        {
            "source": {"id": None, "name": "Example Wire"},
            "title": None,
            "description": None,
            "url": "https://example.com/untitled",
            "publishedAt": "2025-06-15T08:00:00Z",
            "content": "Only content here.",
        },
    ],
}


def _response(payload=None, status_code: int = 200, text: str | None = None) -> httpx.Response:
    request = httpx.Request("GET", SOURCE.url)
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, json=payload, request=request)


class TestArticleToRawItem:
    def test_maps_fields(self):
        raw = article_to_raw_item(SAMPLE_PAYLOAD["articles"][0])
        assert raw.title == "Cairo headline"
        assert raw.link == "https://example.com/cairo"
        assert raw.description == "What happened in Cairo."
        assert raw.content == "Full text…"
        assert raw.iso_date == "2025-06-15T09:00:00Z"
        assert raw.pub_date is None

    def test_null_fields_flow_into_normalizer_fallbacks(self):
        raw = article_to_raw_item(SAMPLE_PAYLOAD["articles"][1])
        article = normalize(raw, SOURCE)
        assert article.title == FALLBACK_TITLE
        assert article.description == "Only content here."
        assert article.pub_date == "2025-06-15T08:00:00+00:00"


class TestNewsAPIAdapter:
    def test_name(self):
        assert NewsAPIAdapter(api_key="k").name == "newsapi"

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_fetches_items_with_key_header(self, mock_get):
        mock_get.return_value = _response(SAMPLE_PAYLOAD)

        items = NewsAPIAdapter(timeout=5.0, api_key="secret").fetch(SOURCE)

        assert len(items) == 2
        mock_get.assert_called_once_with(
            SOURCE.url,
            headers={"X-Api-Key": "secret"},
            timeout=5.0,
            follow_redirects=True,
        )

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_missing_key_raises_without_request(self, mock_get):
        with pytest.raises(SourceUnavailable, match="NEWS_API_KEY"):
            NewsAPIAdapter().fetch(SOURCE)
        mock_get.assert_not_called()

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_error_status_payload_raises(self, mock_get):
        mock_get.return_value = _response({"status": "error", "message": "rate limited"})
        with pytest.raises(SourceUnavailable, match="rate limited"):
            NewsAPIAdapter(api_key="k").fetch(SOURCE)

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_http_401_raises(self, mock_get):
        mock_get.return_value = _response({"status": "error"}, status_code=401)
        with pytest.raises(SourceUnavailable):
            NewsAPIAdapter(api_key="k").fetch(SOURCE)

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_invalid_json_raises(self, mock_get):
        mock_get.return_value = _response(text="<html>oops</html>")
        with pytest.raises(SourceUnavailable, match="Invalid JSON"):
            NewsAPIAdapter(api_key="k").fetch(SOURCE)

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_missing_articles_list_raises(self, mock_get):
        mock_get.return_value = _response({"status": "ok"})
        with pytest.raises(SourceUnavailable, match="no articles"):
            NewsAPIAdapter(api_key="k").fetch(SOURCE)

    @patch("targetednews.ingestion.newsapi_adapter.httpx.get")
    def test_network_error_raises(self, mock_get):
        mock_get.side_effect = httpx.ConnectTimeout("timed out")
        with pytest.raises(SourceUnavailable):
            NewsAPIAdapter(api_key="k").fetch(SOURCE)
