"""Application entry point — runs scheduler + web server in a single process."""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from targetednews.config import Config, load_config
from targetednews.jobs import SingleFlight, refresh_news
from targetednews.notify import Broadcaster
from targetednews.sources import seed_sources
from targetednews.storage import init_db
from targetednews.web.app import create_app

logger = logging.getLogger("targetednews")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def _build_scheduler(
    config: Config, broadcaster: Broadcaster, guard: SingleFlight
) -> BackgroundScheduler:
    """Create a BackgroundScheduler with the recurring refresh and the delayed first run."""
    scheduler = BackgroundScheduler()
    job_args = [config, broadcaster, guard]

    scheduler.add_job(
        refresh_news,
        trigger=IntervalTrigger(minutes=config.fetch_interval_minutes),
        args=job_args,
        id="refresh",
        name="News refresh",
        max_instances=2,  # overlap is turned away by the SingleFlight guard
        coalesce=True,
    )

    # First run shortly after startup so the registry bootstrap has finished
    first_run = datetime.now(timezone.utc) + timedelta(
        seconds=config.initial_fetch_delay_seconds
    )
    scheduler.add_job(
        refresh_news,
        trigger=DateTrigger(run_date=first_run),
        args=job_args,
        id="initial_refresh",
        name="Initial news refresh",
    )

    return scheduler


def main() -> None:
    """Load config, set up logging, and start scheduler + web server."""
    config = load_config()

    _setup_logging(config.log_level, config.log_format)

    logger.info(
        "TargetedNews starting (env=%s, db=%s, interval=%dm)",
        config.app_env,
        config.database_path,
        config.fetch_interval_minutes,
    )

    init_db(config.database_path)
    if config.sources_seed_path:
        seed_sources(config.database_path, config.sources_seed_path)

    broadcaster = Broadcaster()
    guard = SingleFlight()
    scheduler = _build_scheduler(config, broadcaster, guard)

    @asynccontextmanager
    async def lifespan(app):
        logger.info("Scheduler starting")
        scheduler.start()
        yield
        logger.info("Scheduler shutting down")
        scheduler.shutdown(wait=False)

    app = create_app(config, broadcaster, guard, lifespan=lifespan)

    uvicorn.run(app, host=config.web_host, port=config.web_port)


if __name__ == "__main__":
    main()
