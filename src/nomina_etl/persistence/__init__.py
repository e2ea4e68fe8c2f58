"""Pluggable document store backends behind the IDocumentStore protocol."""

from __future__ import annotations

from nomina_etl.core.config import AppSettings
from nomina_etl.core.protocols import IDocumentStore
from nomina_etl.persistence.dynamodb_backend import DynamoDBDocumentStore
from nomina_etl.persistence.memory_backend import MemoryDocumentStore
from nomina_etl.persistence.mongo_backend import MongoDocumentStore


def create_store(settings: AppSettings | None = None) -> IDocumentStore:
    """Create the document store selected by ``settings.backend``.

    The caller owns the returned handle and must ``close()`` it.
    """
    if settings is None:
        settings = AppSettings()

    if settings.backend == "memory":
        return MemoryDocumentStore()

    if settings.backend == "dynamodb":
        return DynamoDBDocumentStore(
            table_prefix=settings.dynamodb.table_prefix,
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )

    return MongoDocumentStore(
        uri=settings.mongo.uri,
        database=settings.mongo.database,
        server_selection_timeout_ms=settings.mongo.server_selection_timeout_ms,
    )


__all__ = ["DynamoDBDocumentStore", "MemoryDocumentStore", "MongoDocumentStore", "create_store"]
