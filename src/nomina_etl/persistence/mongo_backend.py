"""MongoDB backend implementing IDocumentStore."""

from __future__ import annotations

from typing import Any

from pymongo import InsertOne, MongoClient, ReplaceOne
from pymongo.errors import BulkWriteError, PyMongoError

from nomina_etl.core.exceptions import StoreError, WriteError
from nomina_etl.models.outcome import BulkWriteResult

DUPLICATE_KEY = 11000


def _from_bulk_error(exc: BulkWriteError) -> BulkWriteResult:
    """Split a partially applied unordered batch into counts and messages."""
    details = exc.details or {}
    result = BulkWriteResult(
        inserted=details.get("nInserted", 0),
        upserted=details.get("nUpserted", 0),
        modified=details.get("nModified", 0),
        matched=max(details.get("nMatched", 0) - details.get("nModified", 0), 0),
    )
    for err in details.get("writeErrors", []):
        message = f"Document {err.get('index')}: {err.get('errmsg', 'write error')}"
        if err.get("code") == DUPLICATE_KEY:
            result.duplicate_keys += 1
            result.duplicate_errors.append(message)
        else:
            result.errors.append(message)
    return result


class MongoDocumentStore:
    """Production IDocumentStore backed by pymongo. Batches run unordered."""

    def __init__(self, uri: str = "mongodb://localhost:27017", database: str = "eantion",
                 server_selection_timeout_ms: int = 5000) -> None:
        self._uri = uri
        self._database = database
        self._client = MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self._db = self._client[database]

    def count(self, collection: str) -> int:
        try:
            return self._db[collection].count_documents({})
        except PyMongoError as exc:
            raise StoreError(collection, str(exc)) from exc

    def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> BulkWriteResult:
        if not documents:
            return BulkWriteResult()
        try:
            # pymongo writes the generated _id back into the dicts it is given
            res = self._db[collection].insert_many([dict(doc) for doc in documents], ordered=False)
            return BulkWriteResult(inserted=len(res.inserted_ids))
        except BulkWriteError as exc:
            return _from_bulk_error(exc)
        except PyMongoError as exc:
            raise WriteError(collection, str(exc)) from exc

    def upsert_many(
        self, collection: str, documents: list[dict[str, Any]], id_field: str = "_id"
    ) -> BulkWriteResult:
        if not documents:
            return BulkWriteResult()
        ops: list[Any] = [
            ReplaceOne({id_field: doc[id_field]}, doc, upsert=True)
            if doc.get(id_field) is not None
            else InsertOne(dict(doc))
            for doc in documents
        ]
        try:
            res = self._db[collection].bulk_write(ops, ordered=False)
        except BulkWriteError as exc:
            return _from_bulk_error(exc)
        except PyMongoError as exc:
            raise WriteError(collection, str(exc)) from exc
        return BulkWriteResult(
            inserted=res.inserted_count,
            upserted=res.upserted_count,
            modified=res.modified_count,
            matched=res.matched_count - res.modified_count,
        )

    def find_one(self, collection: str, criteria: dict[str, Any]) -> dict[str, Any] | None:
        try:
            return self._db[collection].find_one(criteria)
        except PyMongoError as exc:
            raise StoreError(collection, str(exc)) from exc

    def delete_all(self, collection: str) -> int:
        try:
            return self._db[collection].delete_many({}).deleted_count
        except PyMongoError as exc:
            raise WriteError(collection, str(exc)) from exc

    def close(self) -> None:
        self._client.close()
