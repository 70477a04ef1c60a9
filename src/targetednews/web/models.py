"""Pydantic v2 request and response models for the web API."""

from __future__ import annotations

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------
class Region(BaseModel):
    id: int
    name: str
    code: str
    flag_emoji: str | None
    created_at: str


class RegionWithCount(Region):
    article_count: int


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------
class ArticleOut(BaseModel):
    id: int
    source_id: int | None
    region_code: str
    title: str
    description: str | None
    link: str | None
    pub_date: str | None
    created_at: str
    source_name: str | None


class NewsResponse(BaseModel):
    success: bool
    country: str
    articles: list[ArticleOut]
    count: int


class FetchNewsResponse(BaseModel):
    success: bool
    message: str
    count: int
    inserted: int


class FetchRun(BaseModel):
    id: str
    started_at: str
    finished_at: str
    status: str
    articles_processed: int
    articles_inserted: int
    sources_failed: int
    error: str | None


# ---------------------------------------------------------------------------
# Sources (admin)
# ---------------------------------------------------------------------------
class SourceOut(BaseModel):
    id: int
    region_code: str
    url: str
    name: str
    adapter: str
    is_active: bool
    created_at: str
    region_name: str
    flag_emoji: str | None


class SourceCreate(BaseModel):
    """Body of POST /admin/sources. Field names follow the browser client."""

    country_code: str | None = None
    rss_url: str | None = None
    source_name: str | None = None
    adapter: str = "rss"
