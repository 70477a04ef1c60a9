"""FastAPI application factory for the TargetedNews web API."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from targetednews.config import Config
from targetednews.ingestion.adapter import FeedAdapter
from targetednews.jobs import SingleFlight
from targetednews.notify import Broadcaster
from targetednews.web.routes import admin_router, health_router, router, ws_router


def create_app(
    config: Config,
    broadcaster: Broadcaster | None = None,
    refresh_guard: SingleFlight | None = None,
    adapters: dict[str, FeedAdapter] | None = None,
    lifespan=None,
) -> FastAPI:
    """Build and return a configured FastAPI application.

    The broadcaster and refresh guard are shared with the scheduler so that
    manual and scheduled refreshes never overlap and reach the same
    subscribers. ``adapters`` overrides the registered fetch adapters.
    """
    app = FastAPI(title="TargetedNews", docs_url="/api/docs", lifespan=lifespan)
    app.state.config = config
    app.state.broadcaster = broadcaster or Broadcaster()
    app.state.refresh_guard = refresh_guard or SingleFlight()
    app.state.adapters = adapters

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(router, prefix="/api")
    app.include_router(admin_router, prefix="/admin")
    app.include_router(ws_router)

    static_path = Path(config.static_dir)
    if static_path.is_dir():
        app.mount("/app", StaticFiles(directory=str(static_path), html=True), name="static")

    return app
