"""Shared test doubles."""

from __future__ import annotations

from nomina_etl.persistence.memory_backend import MemoryDocumentStore

__all__ = ["MemoryDocumentStore"]
