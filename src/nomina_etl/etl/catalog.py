"""Built-in load configuration for the HR collections, plus JSON overrides."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from nomina_etl.core.exceptions import ConfigError
from nomina_etl.models.collection import (
    ArrayFieldSpec,
    Catalog,
    CollectionConfig,
    ConsolidationSpec,
    SubFieldSpec,
)

NOMINA_CONSOLIDATION = ConsolidationSpec(
    group_key="_id",
    arrays=[
        ArrayFieldSpec(
            name="conceptos",
            discriminant="codigo_concepto",
            fields=[
                SubFieldSpec(name="codigo_concepto"),
                SubFieldSpec(name="valor", numeric=True, default=0),
                SubFieldSpec(name="descripcion", default=""),
            ],
        ),
        ArrayFieldSpec(
            name="novedades",
            discriminant="codigo_novedad",
            fields=[
                SubFieldSpec(name="codigo_novedad"),
                SubFieldSpec(name="dias", numeric=True),
                SubFieldSpec(name="descripcion", default=""),
                SubFieldSpec(name="valor", numeric=True),
            ],
        ),
    ],
    numeric_fields=[
        "total_devengado",
        "total_deducciones",
        "neto_pagar",
        "periodo.mes",
        "periodo.año",
    ],
    natural_key=["empleado_id", "periodo.mes", "periodo.año"],
)


def default_catalog() -> Catalog:
    """Configuration for empleados, contratos, conceptos, novedades and nominas.

    Foreign keys (``empleado_id``) are read as plain strings so they are
    stored exactly as exported.
    """
    return Catalog(
        collections={
            "empleados": CollectionConfig(
                required_fields=["informacion_personal.nombres", "informacion_personal.apellidos"],
                field_types={
                    "_id": "objectid",
                    "informacion_personal.numero_identificacion": "string",
                    "fechaCreacion": "date",
                },
            ),
            "contratos": CollectionConfig(
                required_fields=["empleado_id"],
                field_types={
                    "_id": "objectid",
                    "empleado_id": "string",
                    "fecha_inicio": "date",
                    "salario_base": "number",
                },
            ),
            "conceptos": CollectionConfig(
                required_fields=["codigo"],
                field_types={"_id": "objectid", "codigo": "string"},
            ),
            "novedades": CollectionConfig(
                required_fields=["codigo"],
                field_types={"_id": "objectid", "codigo": "string", "afecta": "string"},
            ),
            "nominas": CollectionConfig(
                required_fields=["empleado_id"],
                field_types={
                    "_id": "objectid",
                    "empleado_id": "string",
                    "fecha_generacion": "date",
                    "conceptos.codigo_concepto": "string",
                    "novedades.codigo_novedad": "string",
                },
                consolidation=NOMINA_CONSOLIDATION,
            ),
        },
        default=CollectionConfig(field_types={"_id": "objectid"}),
    )


def load_catalog(path: Path | None = None) -> Catalog:
    """Default catalog, with collections from a JSON file layered on top.

    The file has the shape ``{"collections": {name: config}, "default": config}``;
    a collection listed there replaces the built-in entry entirely.

    Raises:
        ConfigError: If the file is unreadable or fails validation, including
            unknown type directives.
    """
    catalog = default_catalog()
    if path is None:
        return catalog

    try:
        overrides = Catalog.model_validate_json(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read catalog {path}: {exc}") from exc
    except ValidationError as exc:
        raise ConfigError(f"Invalid catalog {path}: {exc}") from exc

    catalog.collections.update(overrides.collections)
    if "default" in overrides.model_fields_set:
        catalog.default = overrides.default
    return catalog
