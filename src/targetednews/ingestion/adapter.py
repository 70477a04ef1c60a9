"""Fetch adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from targetednews.ingestion.normalize import RawItem
from targetednews.sources import Source

if TYPE_CHECKING:
    from targetednews.config import Config

DEFAULT_TIMEOUT_SECONDS = 10.0


class FeedAdapter(ABC):
    """Abstract base class for fetch adapters.

    Each adapter knows how to pull items from one family of external source
    and hand them back in the single RawItem shape. Adapters hold no state
    between calls.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> FeedAdapter:
        """Build the adapter from application config."""
        return cls(timeout=config.fetch_timeout_seconds)

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter type name, as stored in ``sources.adapter``."""

    @abstractmethod
    def fetch(self, source: Source) -> list[RawItem]:
        """Fetch the current items for ``source``.

        Raises SourceUnavailable on network errors, timeouts, non-success
        responses and unparseable payloads.
        """
