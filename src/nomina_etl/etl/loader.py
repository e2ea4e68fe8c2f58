"""Load strategy selection and batched writes into the document store."""

from __future__ import annotations

from typing import Any

from loguru import logger

from nomina_etl.core.protocols import IDocumentStore
from nomina_etl.core.types import Record
from nomina_etl.models.outcome import LoadOutcome, LoadStrategy
from nomina_etl.parsing.records import get_path


def select_strategy(
    store: IDocumentStore, collection: str, sample: Record, id_field: str = "_id"
) -> LoadStrategy:
    """Pick one strategy for a whole file from collection emptiness and a sample record.

    Empty collection -> INSERT; sample with an identifier -> UPSERT_BY_ID;
    otherwise INSERT_IGNORE_DUPLICATES.
    """
    if store.count(collection) == 0:
        return LoadStrategy.INSERT
    if sample.get(id_field) is not None:
        return LoadStrategy.UPSERT_BY_ID
    return LoadStrategy.INSERT_IGNORE_DUPLICATES


def prepare(records: list[Record], id_field: str = "_id") -> list[Record]:
    """Drop null identifiers so the store assigns its own."""
    prepared: list[Record] = []
    for record in records:
        if id_field in record and record[id_field] is None:
            record = {k: v for k, v in record.items() if k != id_field}
        prepared.append(record)
    return prepared


def skip_existing(
    store: IDocumentStore,
    collection: str,
    records: list[Record],
    natural_key: list[str],
    id_field: str = "_id",
) -> tuple[list[Record], int]:
    """Filter out records already stored, matched by identifier or natural key.

    Returns:
        The records still to write and how many were skipped.
    """
    fresh: list[Record] = []
    skipped = 0
    for record in records:
        criteria_list: list[dict[str, Any]] = []
        if record.get(id_field) is not None:
            criteria_list.append({id_field: record[id_field]})
        if natural_key:
            criteria_list.append({path: get_path(record, path) for path in natural_key})
        if any(store.find_one(collection, c) is not None for c in criteria_list):
            skipped += 1
            continue
        fresh.append(record)
    return fresh, skipped


def write_batch(
    store: IDocumentStore,
    collection: str,
    records: list[Record],
    strategy: LoadStrategy,
    id_field: str = "_id",
    outcome: LoadOutcome | None = None,
) -> LoadOutcome:
    """Write ``records`` as one unordered batch and fold the counts into an outcome.

    Per-record failures never abort their siblings. Under INSERT a duplicate
    key is an error; under INSERT_IGNORE_DUPLICATES it is a duplicate.

    Raises:
        WriteError: If the store rejects the batch as a whole.
    """
    outcome = outcome or LoadOutcome(collection=collection)
    outcome.strategy = strategy
    documents = prepare(records, id_field)
    if not documents:
        return outcome

    match strategy:
        case LoadStrategy.INSERT:
            result = store.insert_many(collection, documents)
            outcome.processed += result.inserted
            outcome.errors.extend(result.duplicate_errors)
            outcome.errors.extend(result.errors)
        case LoadStrategy.UPSERT_BY_ID:
            result = store.upsert_many(collection, documents, id_field)
            outcome.processed += result.upserted + result.inserted
            outcome.modified += result.modified
            outcome.duplicates += result.matched + result.duplicate_keys
            outcome.errors.extend(result.errors)
        case LoadStrategy.INSERT_IGNORE_DUPLICATES:
            result = store.insert_many(collection, documents)
            outcome.processed += result.inserted
            outcome.duplicates += result.duplicate_keys
            outcome.errors.extend(result.errors)

    logger.info(
        "Results for {} ({}): inserted={} duplicates={} modified={}",
        collection, strategy.value, outcome.processed, outcome.duplicates, outcome.modified,
    )
    return outcome
