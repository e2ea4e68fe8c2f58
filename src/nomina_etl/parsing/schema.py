"""Schema inference and conformance checks over parsed records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from bson import ObjectId

from nomina_etl.core.types import Record
from nomina_etl.models.collection import TypeDirective
from nomina_etl.parsing.records import get_path

_MISSING = object()


def directive_of(value: Any) -> TypeDirective:
    if isinstance(value, ObjectId):
        return TypeDirective.OBJECTID
    if isinstance(value, datetime):
        return TypeDirective.DATE
    if isinstance(value, bool):
        return TypeDirective.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeDirective.NUMBER
    return TypeDirective.STRING


def _walk(node: Mapping[str, Any], prefix: str, out: dict[str, TypeDirective]) -> None:
    for key, value in node.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            _walk(value, f"{path}.", out)
        else:
            out[path] = directive_of(value)


def infer_schema(records: list[Record]) -> dict[str, TypeDirective]:
    """Derive ``{dot-path: directive}`` from the first record.

    The result has the same shape as ``CollectionConfig.field_types`` so it
    can be pasted into a catalog.
    """
    if not records:
        return {}
    schema: dict[str, TypeDirective] = {}
    _walk(records[0], "", schema)
    return schema


def conforms(record: Record, schema: Mapping[str, TypeDirective]) -> bool:
    """True when every schema path is present with a value of that type."""
    for path, directive in schema.items():
        value = get_path(record, path, _MISSING)
        if value is _MISSING:
            return False
        if directive is not TypeDirective.AUTO and directive_of(value) is not directive:
            return False
    return True


def validate_records(records: list[Record], schema: Mapping[str, TypeDirective]) -> list[Record]:
    """Keep only records conforming to ``schema``."""
    return [r for r in records if conforms(r, schema)]
