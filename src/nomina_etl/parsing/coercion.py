"""Type coercion of raw CSV strings into typed document values.

Each field is converted according to its collection's :class:`TypeDirective`;
fields without a directive are auto-detected.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Mapping

from bson import ObjectId
from bson.errors import InvalidId

from nomina_etl.core.exceptions import (
    CoercionError,
    InvalidBooleanError,
    InvalidDateError,
    InvalidIdentifierError,
    InvalidNumberError,
    RowCoercionError,
)
from nomina_etl.models.collection import TypeDirective

NUMERIC_PATTERN = re.compile(r"^-?\d+\.?\d*$")

TRUE_LITERALS = frozenset({"true", "1", "si"})
FALSE_LITERALS = frozenset({"false", "0", "no"})

# Day-first, as exported by the HR spreadsheets.
DATE_FORMATS = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
)


def unwrap_quotes(value: str) -> str:
    """Strip one layer of matching ``"`` or ``'`` and un-double the inner quotes."""
    for quote in ('"', "'"):
        if len(value) >= 2 and value.startswith(quote) and value.endswith(quote):
            return value[1:-1].replace(quote * 2, quote)
    return value


def parse_date(value: str) -> datetime | None:
    """Parse ISO-8601 or one of ``DATE_FORMATS``; ``None`` if nothing matches."""
    iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def to_number(value: Any) -> float:
    """Convert ``value`` to float.

    Raises:
        InvalidNumberError: For non-numeric text, NaN, infinities or digit separators.
    """
    if isinstance(value, (bool, int, float)):
        number = float(value)
        text = str(value)
    else:
        text = str(value).strip()
        if "_" in text:
            raise InvalidNumberError(f"Not a valid number: {text}")
        try:
            number = float(text)
        except ValueError as exc:
            raise InvalidNumberError(f"Not a valid number: {text}") from exc
    if not math.isfinite(number):
        raise InvalidNumberError(f"Not a valid number: {text}")
    return number


def to_boolean(value: str) -> bool:
    lowered = value.lower()
    if lowered in TRUE_LITERALS:
        return True
    if lowered in FALSE_LITERALS:
        return False
    raise InvalidBooleanError(f"Invalid boolean value: {value}")


def auto_detect(value: str) -> Any:
    """Infer a value's type: quoted string, number, boolean, date, else string."""
    unquoted = unwrap_quotes(value)
    if unquoted != value:
        return unquoted

    if NUMERIC_PATTERN.match(value):
        number = float(value)
        if math.isfinite(number):
            return number
        return value

    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    parsed = parse_date(value)
    if parsed is not None:
        return parsed

    return value


def convert(value: str, directive: TypeDirective) -> Any:
    """Convert an already trimmed, non-empty value. Raises CoercionError subclasses."""
    match directive:
        case TypeDirective.OBJECTID:
            try:
                return ObjectId(value)
            except (InvalidId, TypeError) as exc:
                raise InvalidIdentifierError(f"Invalid ObjectId: {value}") from exc
        case TypeDirective.DATE:
            parsed = parse_date(value)
            if parsed is None:
                raise InvalidDateError(f"Invalid date: {value}")
            return parsed
        case TypeDirective.NUMBER:
            return to_number(value)
        case TypeDirective.BOOLEAN:
            return to_boolean(value)
        case TypeDirective.STRING:
            return unwrap_quotes(value)
        case TypeDirective.AUTO:
            return auto_detect(value)


def coerce_value(
    path: str,
    raw: str,
    field_types: Mapping[str, TypeDirective] | None = None,
) -> Any:
    """Coerce one raw CSV value for ``path``.

    Empty input is ``None`` whatever the directive. Directives are looked up
    by lower-cased path; a missing entry means auto-detection.

    Raises:
        RowCoercionError: Wrapping the underlying CoercionError with the
            field path and raw value.
    """
    if raw == "":
        return None
    value = raw.strip()
    if value == "":
        return None

    directive = (field_types or {}).get(path.lower(), TypeDirective.AUTO)
    try:
        return convert(value, directive)
    except CoercionError as exc:
        raise RowCoercionError(path, raw, exc) from exc
