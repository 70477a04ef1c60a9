"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    database_path: str

    # Optional — Sources
    news_api_key: str = ""
    sources_seed_path: str = ""

    # Optional — Ingestion
    fetch_interval_minutes: int = 10
    initial_fetch_delay_seconds: int = 5
    fetch_timeout_seconds: float = 10.0

    # Optional — Web
    web_host: str = "0.0.0.0"
    web_port: int = 3001
    static_dir: str = "./static"

    # Optional — Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"


_REQUIRED_VARS = [
    "DATABASE_PATH",
]


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables, or if the fetch interval is not a positive number
    of minutes.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    fetch_interval_minutes = int(os.environ.get("FETCH_INTERVAL_MINUTES", "10"))
    if fetch_interval_minutes < 1:
        raise ValueError(
            f"FETCH_INTERVAL_MINUTES must be at least 1, got {fetch_interval_minutes}"
        )

    return Config(
        # Required
        database_path=os.environ["DATABASE_PATH"],
        # Optional — Sources
        news_api_key=os.environ.get("NEWS_API_KEY", ""),
        sources_seed_path=os.environ.get("SOURCES_SEED_PATH", ""),
        # Optional — Ingestion
        fetch_interval_minutes=fetch_interval_minutes,
        initial_fetch_delay_seconds=int(os.environ.get("INITIAL_FETCH_DELAY_SECONDS", "5")),
        fetch_timeout_seconds=float(os.environ.get("FETCH_TIMEOUT_SECONDS", "10")),
        # Optional — Web
        web_host=os.environ.get("WEB_HOST", "0.0.0.0"),
        web_port=int(os.environ.get("WEB_PORT", "3001")),
        static_dir=os.environ.get("STATIC_DIR", "./static"),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
    )
