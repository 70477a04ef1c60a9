"""REST news API adapter (newsapi.org-style JSON payloads)."""

from __future__ import annotations

import logging

import httpx

from targetednews.config import Config
from targetednews.ingestion.adapter import DEFAULT_TIMEOUT_SECONDS, FeedAdapter
from targetednews.ingestion.errors import SourceUnavailable
from targetednews.ingestion.normalize import RawItem
from targetednews.sources import Source

logger = logging.getLogger(__name__)


def article_to_raw_item(article: dict) -> RawItem:
    """Map one API article object onto the RawItem shape."""
    return RawItem(
        title=article.get("title") or None,
        link=article.get("url") or None,
        description=article.get("description") or None,
        content=article.get("content") or None,
        iso_date=article.get("publishedAt") or None,
    )


class NewsAPIAdapter(FeedAdapter):
    """Adapter for a JSON news API.

    The source URL is the full query endpoint, for example
    ``https://newsapi.org/v2/everything?q=Kenya``. The API key is sent in the
    ``X-Api-Key`` header.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS, api_key: str = "") -> None:
        super().__init__(timeout)
        self._api_key = api_key

    @classmethod
    def from_config(cls, config: Config) -> NewsAPIAdapter:
        return cls(timeout=config.fetch_timeout_seconds, api_key=config.news_api_key)

    @property
    def name(self) -> str:
        return "newsapi"

    def fetch(self, source: Source) -> list[RawItem]:
        if not self._api_key:
            raise SourceUnavailable(source.name, "NEWS_API_KEY is not configured")

        try:
            response = httpx.get(
                source.url,
                headers={"X-Api-Key": self._api_key},
                timeout=self._timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise SourceUnavailable(source.name, f"HTTP error fetching {source.url}: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailable(source.name, f"Invalid JSON from {source.url}") from exc

        if not isinstance(payload, dict) or payload.get("status") != "ok":
            message = payload.get("message") if isinstance(payload, dict) else None
            raise SourceUnavailable(source.name, f"API error: {message or 'unexpected response'}")

        articles = payload.get("articles")
        if not isinstance(articles, list):
            raise SourceUnavailable(source.name, "Response has no articles list")

        items = [article_to_raw_item(a) for a in articles if isinstance(a, dict)]
        logger.info("Found %d articles from %s", len(items), source.name)
        return items
