"""Nested record building and whole-file CSV parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from nomina_etl.core.exceptions import RowCoercionError
from nomina_etl.core.types import RawRow, Record
from nomina_etl.models.collection import CollectionConfig, TypeDirective
from nomina_etl.parsing.coercion import coerce_value
from nomina_etl.parsing.headers import resolve_headers
from nomina_etl.parsing.lines import Line, read_lines
from nomina_etl.parsing.tokenizer import tokenize_line

MAX_LOGGED_ERRORS = 5


def set_path(record: Record, path: str, value: Any) -> None:
    """Assign ``value`` at dot-path ``path``, creating intermediate dicts.

    An intermediate segment holding a scalar is replaced by an empty dict, so
    the last write decides the shape.
    """
    segments = path.split(".")
    node = record
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    node[segments[-1]] = value


def get_path(record: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Read a dot-path, returning ``default`` if any segment is missing."""
    node: Any = record
    for segment in path.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            return default
        node = node[segment]
    return node


def build_record(
    fields: RawRow,
    headers: list[str],
    field_types: Mapping[str, TypeDirective] | None = None,
) -> Record:
    """Coerce each value of one row and nest it under its header path.

    Rows shorter than the header are padded with empty values; extra values
    are ignored.

    Raises:
        RowCoercionError: On the first field that fails coercion.
    """
    record: Record = {}
    for index, header in enumerate(headers):
        raw = fields[index] if index < len(fields) else ""
        set_path(record, header, coerce_value(header, raw, field_types))
    return record


@dataclass
class ParseResult:
    """Records parsed from one file plus the row errors skipped in lenient mode."""

    records: list[Record] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    row_count: int = 0

    @property
    def empty(self) -> bool:
        return not self.records


def log_errors(source: str, errors: list[str], limit: int = MAX_LOGGED_ERRORS) -> None:
    """Log at most ``limit`` error lines; the list itself is kept intact."""
    if not errors:
        return
    logger.warning("Errors in {}:\n{}", source, "\n".join(errors[:limit]))
    if len(errors) > limit:
        logger.warning("... and {} more", len(errors) - limit)


def parse_lines(lines: list[Line], config: CollectionConfig, source: str = "<memory>") -> ParseResult:
    """Parse already normalized lines (header first) into records."""
    result = ParseResult()
    if len(lines) <= 1:
        logger.warning("CSV file is empty or has only a header: {}", source)
        return result

    headers = resolve_headers(tokenize_line(lines[0].text), config.required_fields)
    result.row_count = len(lines) - 1

    for row_number, line in enumerate(lines[1:], start=1):
        try:
            record = build_record(tokenize_line(line.text), headers, config.field_types)
        except RowCoercionError as exc:
            exc.row, exc.line = row_number, line.number
            result.errors.append(exc.located())
            if config.strict_mode:
                log_errors(source, result.errors)
                raise
            continue
        result.records.append(record)

    log_errors(source, result.errors)
    return result


def parse_csv(path: Path, config: CollectionConfig | None = None) -> ParseResult:
    """Read, tokenize and coerce a whole CSV file.

    Raises:
        ReadError: If the file cannot be read.
        MissingFieldsError: If required header fields are absent.
        RowCoercionError: In strict mode, on the first bad row.
    """
    config = config or CollectionConfig()
    lines = read_lines(path)
    return parse_lines(lines, config, source=str(path))
