"""In-memory document store for unit tests and dry runs."""

from __future__ import annotations

import copy
from typing import Any

from bson import ObjectId

from nomina_etl.models.outcome import BulkWriteResult
from nomina_etl.parsing.records import get_path


class MemoryDocumentStore:
    """Dict-backed IDocumentStore. Collections map ``_id`` -> document."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, dict[str, Any]]] = {}
        self.closed = False

    def _coll(self, name: str) -> dict[Any, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def _key_of(self, coll: dict[Any, dict[str, Any]], id_field: str, value: Any) -> Any:
        if id_field == "_id":
            return value if value in coll else None
        for key, doc in coll.items():
            if doc.get(id_field) == value:
                return key
        return None

    def documents(self, collection: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._coll(collection).values()]

    def count(self, collection: str) -> int:
        return len(self._coll(collection))

    def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> BulkWriteResult:
        coll = self._coll(collection)
        result = BulkWriteResult()
        for doc in documents:
            doc = copy.deepcopy(doc)
            if doc.get("_id") is None:
                doc["_id"] = ObjectId()
            if doc["_id"] in coll:
                result.duplicate_keys += 1
                result.duplicate_errors.append(f"E11000 duplicate key: _id {doc['_id']}")
                continue
            coll[doc["_id"]] = doc
            result.inserted += 1
        return result

    def upsert_many(
        self, collection: str, documents: list[dict[str, Any]], id_field: str = "_id"
    ) -> BulkWriteResult:
        coll = self._coll(collection)
        result = BulkWriteResult()
        for doc in documents:
            doc = copy.deepcopy(doc)
            if doc.get(id_field) is None:
                inserted = self.insert_many(collection, [doc])
                result.inserted += inserted.inserted
                continue
            key = self._key_of(coll, id_field, doc[id_field])
            if key is None:
                doc.setdefault("_id", ObjectId())
                coll[doc["_id"]] = doc
                result.upserted += 1
                continue
            existing = coll[key]
            doc.setdefault("_id", existing["_id"])
            if existing == doc:
                result.matched += 1
            else:
                result.modified += 1
            coll[key] = doc
        return result

    def find_one(self, collection: str, criteria: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self._coll(collection).values():
            if all(get_path(doc, path) == value for path, value in criteria.items()):
                return copy.deepcopy(doc)
        return None

    def delete_all(self, collection: str) -> int:
        coll = self._coll(collection)
        deleted = len(coll)
        coll.clear()
        return deleted

    def close(self) -> None:
        self.closed = True
