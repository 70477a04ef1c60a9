"""Storage layer — SQLite database access and schema management."""

from targetednews.storage.connection import get_connection
from targetednews.storage.schema import init_db

__all__ = ["get_connection", "init_db"]
