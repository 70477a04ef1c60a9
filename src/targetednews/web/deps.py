"""Request-scoped dependencies for the web API."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Generator

from fastapi import Request

from targetednews.config import Config
from targetednews.jobs import SingleFlight
from targetednews.notify import Broadcaster


@contextmanager
def get_readonly_connection(database_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Open a read-only SQLite connection. Closes on exit, never commits."""
    conn = sqlite3.connect(f"file:{database_path}?mode=ro", uri=True)
    conn.execute("PRAGMA query_only=ON")
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_guard(request: Request) -> SingleFlight:
    return request.app.state.refresh_guard
