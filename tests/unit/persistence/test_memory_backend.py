"""Tests for the in-memory document store."""

from __future__ import annotations

from bson import ObjectId

from nomina_etl.core.protocols import IDocumentStore
from tests.fakes import MemoryDocumentStore


def test_satisfies_protocol(store):
    assert isinstance(store, IDocumentStore)


def test_insert_and_count(store):
    result = store.insert_many("empleados", [{"_id": "A"}, {"nombre": "Ana"}])
    assert result.inserted == 2
    assert store.count("empleados") == 2
    assert store.count("otra") == 0


def test_insert_copies_documents(store):
    doc = {"_id": "A", "periodo": {"mes": 1.0}}
    store.insert_many("nominas", [doc])
    doc["periodo"]["mes"] = 2.0
    assert store.find_one("nominas", {"_id": "A"})["periodo"]["mes"] == 1.0


def test_duplicate_key(store):
    store.insert_many("empleados", [{"_id": "A"}])
    result = store.insert_many("empleados", [{"_id": "A"}])
    assert result.duplicate_keys == 1
    assert result.duplicate_errors == ["E11000 duplicate key: _id A"]


def test_upsert_by_custom_field(store):
    store.insert_many("conceptos", [{"codigo": "C1", "nombre": "Salario"}])
    result = store.upsert_many(
        "conceptos", [{"codigo": "C1", "nombre": "Sueldo"}, {"codigo": "C2"}], id_field="codigo"
    )
    assert (result.modified, result.upserted) == (1, 1)
    doc = store.find_one("conceptos", {"codigo": "C1"})
    assert doc["nombre"] == "Sueldo"
    assert isinstance(doc["_id"], ObjectId)


def test_find_one_by_dot_path(store):
    store.insert_many("nominas", [{"_id": "N1", "periodo": {"mes": 3.0}}])
    assert store.find_one("nominas", {"periodo.mes": 3.0})["_id"] == "N1"
    assert store.find_one("nominas", {"periodo.mes": 4.0}) is None


def test_delete_all_and_close():
    store = MemoryDocumentStore()
    store.insert_many("empleados", [{"_id": "A"}, {"_id": "B"}])
    assert store.delete_all("empleados") == 2
    assert store.count("empleados") == 0
    store.close()
    assert store.closed
