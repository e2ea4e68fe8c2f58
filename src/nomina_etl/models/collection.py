"""Per-collection load configuration models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class TypeDirective(StrEnum):
    OBJECTID = "objectid"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    AUTO = "auto"


class SubFieldSpec(BaseModel):
    """One field of an array sub-item, e.g. ``valor`` in ``conceptos``."""

    name: str
    numeric: bool = False
    default: Any = None


class ArrayFieldSpec(BaseModel):
    """Array built from repeated rows, keyed on a discriminant sub-field."""

    name: str
    discriminant: str
    fields: list[SubFieldSpec] = Field(default_factory=list)  # empty keeps the whole sub-object


class ConsolidationSpec(BaseModel):
    """How rows sharing a group key are merged into one document."""

    group_key: str = "_id"
    arrays: list[ArrayFieldSpec] = Field(default_factory=list)
    numeric_fields: list[str] = Field(default_factory=list)
    natural_key: list[str] = Field(default_factory=list)


class CollectionConfig(BaseModel):
    """Options applied when loading one CSV file into a collection."""

    strict_mode: bool = True
    required_fields: list[str] = Field(default_factory=list)
    field_types: dict[str, TypeDirective] = Field(default_factory=dict)
    id_field: str = "_id"
    consolidation: Optional[ConsolidationSpec] = None

    @field_validator("field_types", mode="before")
    @classmethod
    def _normalise_field_types(cls, value: Any) -> Any:
        # Paths are matched case-insensitively; directive names too.
        if not isinstance(value, dict):
            return value
        return {
            str(path).strip().lower(): directive.lower() if isinstance(directive, str) else directive
            for path, directive in value.items()
        }


class Catalog(BaseModel):
    """Collection name -> configuration, with a fallback for unknown files."""

    collections: dict[str, CollectionConfig] = Field(default_factory=dict)
    default: CollectionConfig = Field(default_factory=CollectionConfig)

    def config_for(self, collection: str) -> CollectionConfig:
        return self.collections.get(collection, self.default)
