"""nomina-etl exception hierarchy."""

from __future__ import annotations

from typing import Any


class NominaEtlError(Exception):
    """Base exception for all nomina-etl errors."""


class ConfigError(NominaEtlError):
    """Collection catalog or settings could not be loaded."""


class InputLocationError(NominaEtlError):
    """The input directory does not exist. Aborts the whole run."""


class ReadError(NominaEtlError):
    """A CSV file could not be opened or decoded."""

    def __init__(self, path: Any, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot read {path}: {message}")


class MissingFieldsError(NominaEtlError):
    """Header row lacks one or more required field paths."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

class CoercionError(NominaEtlError):
    """A raw value could not be converted to its target type."""


class InvalidIdentifierError(CoercionError):
    """Value is not a valid ObjectId representation."""


class InvalidDateError(CoercionError):
    """Value is not a parseable date/time."""


class InvalidNumberError(CoercionError):
    """Value is not numeric."""


class InvalidBooleanError(CoercionError):
    """Value is not a recognised boolean literal."""


class RowCoercionError(NominaEtlError):
    """A field of one row failed coercion.

    ``row`` and ``line`` are filled in by the row processor once the failing
    row is known.
    """

    def __init__(self, path: str, raw: str, cause: CoercionError) -> None:
        self.path = path
        self.raw = raw
        self.cause = cause
        self.row: int | None = None
        self.line: int | None = None
        super().__init__(f"Field '{path}' (value {raw!r}): {cause}")

    def located(self) -> str:
        """Message prefixed with the row and physical line number."""
        return f"Row {self.row} (line {self.line}): {self}"


# ---------------------------------------------------------------------------
# Consolidation / load
# ---------------------------------------------------------------------------

class ConsolidationError(NominaEtlError):
    """Rows could not be grouped or a sub-item could not be shaped."""


class StoreError(NominaEtlError):
    """Document store operation failed."""

    action = "Store operation on"

    def __init__(self, collection: str, message: str) -> None:
        self.collection = collection
        super().__init__(f"{self.action} '{collection}' failed: {message}")


class WriteError(StoreError):
    """The store rejected a whole batch (connection lost, timeout, ...)."""

    action = "Write to"


class NoValidRowsError(NominaEtlError):
    """Every data row of a file failed in lenient mode."""
