"""Ingestion error conditions."""

from __future__ import annotations


class SourceUnavailable(Exception):
    """A single source could not be fetched or its response could not be parsed."""

    def __init__(self, source_name: str, reason: str) -> None:
        super().__init__(f"{source_name}: {reason}")
        self.source_name = source_name
        self.reason = reason


class OrchestratorFailure(Exception):
    """An ingestion run could not proceed past per-source error handling."""
