"""Tests for MongoDocumentStore with a patched MongoClient."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pymongo import InsertOne, ReplaceOne
from pymongo.errors import AutoReconnect, BulkWriteError

from nomina_etl.core.exceptions import StoreError, WriteError
from nomina_etl.persistence.mongo_backend import MongoDocumentStore


@pytest.fixture
def client():
    mock = MagicMock()
    with patch("nomina_etl.persistence.mongo_backend.MongoClient", return_value=mock) as cls:
        mock.constructor = cls
        yield mock


@pytest.fixture
def coll(client):
    return client.__getitem__.return_value.__getitem__.return_value


@pytest.fixture
def store(client):
    return MongoDocumentStore(uri="mongodb://db:27017", database="eantion", server_selection_timeout_ms=100)


class TestMongoDocumentStore:
    def test_client_configuration(self, client, store):
        client.constructor.assert_called_once_with("mongodb://db:27017", serverSelectionTimeoutMS=100)
        client.__getitem__.assert_called_once_with("eantion")

    def test_count(self, coll, store):
        coll.count_documents.return_value = 3
        assert store.count("empleados") == 3
        coll.count_documents.assert_called_once_with({})

    def test_count_failure(self, coll, store):
        coll.count_documents.side_effect = AutoReconnect("lost")
        with pytest.raises(StoreError):
            store.count("empleados")

    def test_insert_unordered(self, coll, store):
        coll.insert_many.return_value.inserted_ids = ["A", "B"]
        docs = [{"_id": "A"}, {"_id": "B"}]
        assert store.insert_many("empleados", docs).inserted == 2
        coll.insert_many.assert_called_once_with(docs, ordered=False)

    def test_insert_leaves_caller_documents_untouched(self, coll, store):
        def assign_ids(documents, ordered):
            for n, doc in enumerate(documents):
                doc["_id"] = n
            return MagicMock(inserted_ids=list(range(len(documents))))

        coll.insert_many.side_effect = assign_ids
        docs = [{"nombre": "Ana"}, {"nombre": "Luis"}]
        assert store.insert_many("empleados", docs).inserted == 2
        assert docs == [{"nombre": "Ana"}, {"nombre": "Luis"}]

    def test_upsert_inserts_copies(self, coll, store):
        coll.bulk_write.return_value = MagicMock(
            inserted_count=1, upserted_count=0, modified_count=0, matched_count=0
        )
        doc = {"nombre": "Ana"}
        store.upsert_many("empleados", [doc])
        (op,) = coll.bulk_write.call_args.args[0]
        assert isinstance(op, InsertOne)
        assert op == InsertOne({"nombre": "Ana"})
        assert op._doc is not doc

    def test_insert_partial_failure(self, coll, store):
        coll.insert_many.side_effect = BulkWriteError({
            "nInserted": 2,
            "writeErrors": [
                {"index": 1, "code": 11000, "errmsg": "E11000 duplicate key error"},
                {"index": 3, "code": 121, "errmsg": "Document failed validation"},
            ],
        })
        result = store.insert_many("empleados", [{"_id": str(n)} for n in range(4)])
        assert result.inserted == 2
        assert result.duplicate_keys == 1
        assert result.duplicate_errors == ["Document 1: E11000 duplicate key error"]
        assert result.errors == ["Document 3: Document failed validation"]

    def test_insert_connection_lost(self, coll, store):
        coll.insert_many.side_effect = AutoReconnect("lost")
        with pytest.raises(WriteError, match="Write to 'empleados' failed"):
            store.insert_many("empleados", [{"_id": "A"}])

    def test_insert_empty_batch(self, coll, store):
        assert store.insert_many("empleados", []).inserted == 0
        coll.insert_many.assert_not_called()

    def test_upsert_operations(self, coll, store):
        coll.bulk_write.return_value = MagicMock(
            inserted_count=1, upserted_count=1, modified_count=1, matched_count=2
        )
        result = store.upsert_many("empleados", [{"_id": "A"}, {"_id": "B"}, {"_id": "C"}, {"nombre": "Ana"}])
        ops = coll.bulk_write.call_args.args[0]
        assert [type(op) for op in ops] == [ReplaceOne, ReplaceOne, ReplaceOne, InsertOne]
        assert coll.bulk_write.call_args.kwargs == {"ordered": False}
        assert (result.inserted, result.upserted, result.modified, result.matched) == (1, 1, 1, 1)

    def test_upsert_partial_failure(self, coll, store):
        coll.bulk_write.side_effect = BulkWriteError({
            "nUpserted": 1, "nModified": 1, "nMatched": 1,
            "writeErrors": [{"index": 2, "code": 2, "errmsg": "bad value"}],
        })
        result = store.upsert_many("empleados", [{"_id": "A"}, {"_id": "B"}, {"_id": "C"}])
        assert (result.upserted, result.modified, result.matched) == (1, 1, 0)
        assert result.errors == ["Document 2: bad value"]

    def test_find_one(self, coll, store):
        coll.find_one.return_value = {"_id": "A"}
        assert store.find_one("empleados", {"periodo.mes": 3.0}) == {"_id": "A"}
        coll.find_one.assert_called_once_with({"periodo.mes": 3.0})

    def test_delete_all(self, coll, store):
        coll.delete_many.return_value.deleted_count = 5
        assert store.delete_all("empleados") == 5

    def test_close(self, client, store):
        store.close()
        client.close.assert_called_once()
