"""API route handlers for the TargetedNews web API."""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from targetednews.config import Config
from targetednews.ingestion.errors import OrchestratorFailure
from targetednews.ingestion.registry import get_adapter_class, registered_types
from targetednews.jobs import RefreshInProgress, SingleFlight, refresh_news_now
from targetednews.notify import Broadcaster
from targetednews.sources import add_source, delete_source, list_sources
from targetednews.storage.connection import get_connection
from targetednews.web.deps import get_broadcaster, get_config, get_guard
from targetednews.web.models import (
    FetchNewsResponse,
    FetchRun,
    NewsResponse,
    Region,
    RegionWithCount,
    SourceCreate,
    SourceOut,
)
from targetednews.web.queries import (
    list_fetch_runs,
    list_region_articles,
    list_regions,
    list_regions_with_counts,
)

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()
health_router = APIRouter()
ws_router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


@health_router.get("/")
def index() -> dict:
    return {
        "message": "TargetedNews API is running",
        "endpoints": {
            "countries": "/api/countries",
            "news": "/api/news/{country_code}",
            "fetch_news": "/api/fetch-news",
            "admin_sources": "/admin/sources",
            "updates": "/ws",
        },
    }


@health_router.get("/health")
def health(config: Config = Depends(get_config)) -> JSONResponse:
    """Check database connectivity and return health status."""
    try:
        with get_connection(config.database_path) as conn:
            conn.execute("SELECT 1")
        return JSONResponse({"status": "healthy", "database": "ok"})
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            {"status": "unhealthy", "database": "error", "detail": str(exc)},
            status_code=503,
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
@router.get("/countries", response_model=list[Region])
def countries(config: Config = Depends(get_config)) -> list[dict]:
    return list_regions(config.database_path)


@router.get("/countries-with-news", response_model=list[RegionWithCount])
def countries_with_news(config: Config = Depends(get_config)) -> list[dict]:
    return list_regions_with_counts(config.database_path)


@router.get("/news/{country_code}", response_model=NewsResponse)
def country_news(country_code: str, config: Config = Depends(get_config)) -> NewsResponse:
    articles = list_region_articles(config.database_path, country_code)
    return NewsResponse(
        success=True, country=country_code, articles=articles, count=len(articles)
    )


@router.get("/fetch-news", response_model=FetchNewsResponse)
def fetch_news(
    request: Request,
    config: Config = Depends(get_config),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    guard: SingleFlight = Depends(get_guard),
):
    """Run an ingestion immediately and report how many articles were processed."""
    try:
        result = refresh_news_now(
            config, broadcaster, guard, adapters=request.app.state.adapters
        )
    except RefreshInProgress as exc:
        return _error(409, str(exc))
    except OrchestratorFailure as exc:
        logger.exception("Manual refresh failed")
        return _error(500, str(exc))

    return FetchNewsResponse(
        success=True,
        message=f"Successfully processed {result.processed} articles",
        count=result.processed,
        inserted=result.inserted,
    )


@router.get("/runs", response_model=list[FetchRun])
def runs(config: Config = Depends(get_config)) -> list[dict]:
    return list_fetch_runs(config.database_path)


# ---------------------------------------------------------------------------
# Admin: source registry
# ---------------------------------------------------------------------------
@admin_router.get("/sources", response_model=list[SourceOut])
def get_sources(config: Config = Depends(get_config)) -> list[dict]:
    return list_sources(config.database_path)


@admin_router.post("/sources")
def create_source(body: SourceCreate, config: Config = Depends(get_config)) -> JSONResponse:
    if not body.country_code or not body.rss_url:
        return _error(400, "Country code and RSS URL are required")
    if get_adapter_class(body.adapter) is None:
        return _error(
            400,
            f"Unknown adapter type '{body.adapter}' "
            f"(expected one of: {', '.join(registered_types())})",
        )

    try:
        source_id = add_source(
            config.database_path,
            body.country_code,
            body.rss_url,
            body.source_name,
            body.adapter,
        )
    except ValueError as exc:
        return _error(400, str(exc))

    if source_id is None:
        return JSONResponse(
            {"success": True, "message": "Source already registered", "id": None}
        )
    return JSONResponse(
        {"success": True, "message": "Source added successfully", "id": source_id}
    )


@admin_router.delete("/sources/{source_id}")
def remove_source(source_id: int, config: Config = Depends(get_config)) -> JSONResponse:
    if not delete_source(config.database_path, source_id):
        return _error(404, "Source not found")
    return JSONResponse({"success": True, "message": "Source deleted successfully"})


# ---------------------------------------------------------------------------
# Real-time updates
# ---------------------------------------------------------------------------
@ws_router.websocket("/ws")
async def news_updates(websocket: WebSocket) -> None:
    """Stream refresh notifications to one browser client.

    Events are published from scheduler threads; each is handed to this
    connection's event loop and forwarded as JSON.
    """
    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await websocket.accept()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[dict] = asyncio.Queue()

    def deliver(event: dict) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    unsubscribe = broadcaster.subscribe(deliver)
    logger.info("Client connected (%d subscriber(s))", broadcaster.subscriber_count)

    async def forward() -> None:
        while True:
            event = await queue.get()
            await websocket.send_json(event)

    await websocket.send_json({"event": "connected"})
    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Failed to deliver update to client")
        logger.info("Client disconnected")
