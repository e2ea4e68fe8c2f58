"""Write results, per-collection load outcomes and run reports."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class LoadStrategy(StrEnum):
    INSERT = "insert"
    UPSERT_BY_ID = "upsert"
    INSERT_IGNORE_DUPLICATES = "insert-ignore-duplicates"


class BulkWriteResult(BaseModel):
    """Raw counts returned by a store for one unordered batch."""

    inserted: int = 0
    upserted: int = 0
    modified: int = 0
    matched: int = 0  # matched by identifier, content unchanged
    duplicate_keys: int = 0
    errors: list[str] = Field(default_factory=list)  # non-duplicate failures
    duplicate_errors: list[str] = Field(default_factory=list)


class LoadOutcome(BaseModel):
    """Summary of one file loaded into one collection."""

    collection: str
    source_file: str = ""
    strategy: Optional[LoadStrategy] = None
    rows: int = 0
    processed: int = 0
    duplicates: int = 0
    modified: int = 0
    errors: list[str] = Field(default_factory=list)
    error: str = ""  # file-level failure that aborted this file

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def summary_line(self) -> str:
        line = (
            f"{self.collection}: processed={self.processed} duplicates={self.duplicates} "
            f"modified={self.modified} errors={self.error_count}"
        )
        if self.error:
            line += f" | aborted: {self.error}"
        return line


class RunReport(BaseModel):
    """Result of one ETL run over an input directory."""

    success: bool = False
    results: dict[str, LoadOutcome] = Field(default_factory=dict)
    message: str = ""
    error: str = ""

    @property
    def failed_collections(self) -> list[str]:
        return [name for name, outcome in self.results.items() if outcome.failed]
