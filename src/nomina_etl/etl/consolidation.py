"""Merge repeated rows of one entity into a single document with array fields.

A payroll export repeats the header data of a ``nomina`` on every line and
varies only the ``conceptos.*`` / ``novedades.*`` columns. Rows sharing the
group key collapse into one document whose arrays hold each distinct
sub-item.
"""

from __future__ import annotations

import copy
import itertools
import json
from typing import Any

from loguru import logger

from nomina_etl.core.exceptions import ConsolidationError, InvalidNumberError
from nomina_etl.core.types import Record
from nomina_etl.models.collection import ArrayFieldSpec, ConsolidationSpec
from nomina_etl.parsing.coercion import to_number
from nomina_etl.parsing.records import get_path, set_path

SYNTHETIC_KEY_PREFIX = "__singleton_"

_synthetic_keys = itertools.count(1)
_ABSENT = object()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _number_or_default(value: Any, default: Any, where: str) -> Any:
    if _blank(value):
        return default
    try:
        return to_number(value)
    except InvalidNumberError as exc:
        raise ConsolidationError(f"{where}: {exc}") from exc


def group_key(record: Record, key_path: str) -> Any:
    """Group key of ``record``; a fresh synthetic key when the field is empty."""
    value = get_path(record, key_path)
    if _blank(value):
        return f"{SYNTHETIC_KEY_PREFIX}{next(_synthetic_keys)}"
    try:
        hash(value)
    except TypeError as exc:
        raise ConsolidationError(
            f"Group key '{key_path}' must be a scalar, got {type(value).__name__}"
        ) from exc
    return value


def shape_item(sub: dict[str, Any], spec: ArrayFieldSpec) -> dict[str, Any]:
    """Project a row's sub-object onto the array's field set."""
    if not spec.fields:
        return dict(sub)
    item: dict[str, Any] = {}
    for field in spec.fields:
        value = sub.get(field.name)
        if field.numeric:
            item[field.name] = _number_or_default(value, field.default, f"{spec.name}.{field.name}")
        else:
            item[field.name] = field.default if _blank(value) else value
    return item


def dedupe(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop structurally identical items, keeping first occurrences."""
    seen: set[str] = set()
    unique: list[dict[str, Any]] = []
    for item in items:
        fingerprint = json.dumps(item, sort_keys=True, default=str)
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        unique.append(item)
    return unique


def consolidate(records: list[Record], spec: ConsolidationSpec) -> list[Record]:
    """Collapse rows sharing ``spec.group_key`` into one record each.

    The first row of a group supplies every non-array field. Each array
    collects the row's sub-object whenever its discriminant is non-empty.
    Arrays are deduplicated once all rows are consumed.

    Raises:
        ConsolidationError: If a group key is not a scalar or a numeric
            sub-field holds non-numeric text.
    """
    array_names = {a.name for a in spec.arrays}
    groups: dict[Any, Record] = {}

    for record in records:
        key = group_key(record, spec.group_key)

        base = groups.get(key)
        if base is None:
            base = {k: copy.deepcopy(v) for k, v in record.items() if k not in array_names}
            for array in spec.arrays:
                base[array.name] = []
            groups[key] = base

        for array in spec.arrays:
            sub = record.get(array.name)
            if not isinstance(sub, dict) or _blank(sub.get(array.discriminant)):
                continue
            base[array.name].append(shape_item(sub, array))

    consolidated: list[Record] = []
    for base in groups.values():
        for array in spec.arrays:
            base[array.name] = dedupe(base[array.name])
        for path in spec.numeric_fields:
            value = get_path(base, path, _ABSENT)
            if value is not _ABSENT:
                set_path(base, path, _number_or_default(value, None, path))
        consolidated.append(base)

    logger.debug("Consolidated {} rows into {} documents", len(records), len(consolidated))
    return consolidated
