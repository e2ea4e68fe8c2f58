"""Protocol interfaces for nomina-etl abstractions.

Backends implement these structurally, no inheritance required, so tests can
swap in the in-memory store and check conformance with isinstance().
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from nomina_etl.models.outcome import BulkWriteResult


# ---------------------------------------------------------------------------
# Persistence: Document Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentStore(Protocol):
    """Collection-oriented document store targeted by the loader.

    Batch operations are unordered: a failing document never prevents its
    siblings from being written. Structural failures (lost connection,
    timeout) raise ``WriteError``.
    """

    def count(self, collection: str) -> int: ...

    def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> BulkWriteResult: ...

    def upsert_many(
        self, collection: str, documents: list[dict[str, Any]], id_field: str = "_id"
    ) -> BulkWriteResult: ...

    def find_one(self, collection: str, criteria: dict[str, Any]) -> dict[str, Any] | None: ...

    def delete_all(self, collection: str) -> int: ...

    def close(self) -> None: ...
