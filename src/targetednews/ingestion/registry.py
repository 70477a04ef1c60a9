"""Adapter registry — maps the ``sources.adapter`` column to adapter classes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from targetednews.config import Config
    from targetednews.ingestion.adapter import FeedAdapter

_REGISTRY: dict[str, type[FeedAdapter]] = {}


def register_adapter(type_name: str, cls: type[FeedAdapter]) -> None:
    """Register an adapter class for a given type name."""
    _REGISTRY[type_name] = cls


def get_adapter_class(type_name: str) -> type[FeedAdapter] | None:
    """Look up an adapter class by type name. Returns None if not found."""
    return _REGISTRY.get(type_name)


def registered_types() -> list[str]:
    return sorted(_REGISTRY)


def build_adapters(config: Config) -> dict[str, FeedAdapter]:
    """Instantiate one adapter per registered type, keyed by type name."""
    return {type_name: cls.from_config(config) for type_name, cls in _REGISTRY.items()}
