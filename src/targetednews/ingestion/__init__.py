"""Ingestion pipeline — fetch adapters, normalization, and persistence."""

from targetednews.ingestion.newsapi_adapter import NewsAPIAdapter
from targetednews.ingestion.registry import register_adapter
from targetednews.ingestion.rss_adapter import RSSAdapter

register_adapter("rss", RSSAdapter)
register_adapter("newsapi", NewsAPIAdapter)
