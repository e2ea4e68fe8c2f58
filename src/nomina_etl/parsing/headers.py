"""Header row resolution and required-field validation."""

from __future__ import annotations

from nomina_etl.core.exceptions import MissingFieldsError


def resolve_headers(fields: list[str], required: list[str] | None = None) -> list[str]:
    """Trim header cells into field paths and check required paths are present.

    Raises:
        MissingFieldsError: Listing every required path absent from the header.
    """
    headers = [f.strip() for f in fields]
    if required:
        present = set(headers)
        missing = [path for path in required if path not in present]
        if missing:
            raise MissingFieldsError(missing)
    return headers
