"""Type aliases used across nomina-etl."""

from __future__ import annotations

from typing import Any

Record = dict[str, Any]
RawRow = list[str]  # tokenized CSV line, one string per field
