"""Run orchestrator: discover CSV files and load each into its collection."""

from __future__ import annotations

from contextlib import closing
from pathlib import Path

from loguru import logger

from nomina_etl.core.config import AppSettings
from nomina_etl.core.exceptions import (
    InputLocationError,
    NoValidRowsError,
    NominaEtlError,
    RowCoercionError,
)
from nomina_etl.core.protocols import IDocumentStore
from nomina_etl.etl.catalog import load_catalog
from nomina_etl.etl.consolidation import consolidate
from nomina_etl.etl.loader import select_strategy, skip_existing, write_batch
from nomina_etl.models.collection import Catalog
from nomina_etl.models.outcome import LoadOutcome, RunReport
from nomina_etl.parsing.records import parse_csv
from nomina_etl.parsing.schema import infer_schema, validate_records
from nomina_etl.persistence import create_store

CSV_SUFFIX = ".csv"


def discover_files(input_dir: Path) -> list[Path]:
    """Sorted ``.csv`` files directly under ``input_dir``.

    Raises:
        InputLocationError: If ``input_dir`` does not exist.
    """
    if not input_dir.is_dir():
        raise InputLocationError(
            f"Input directory '{input_dir}' does not exist. Create it and place the CSV files there."
        )
    return sorted(p for p in input_dir.iterdir() if p.is_file() and p.suffix == CSV_SUFFIX)


class EtlRunner:
    """Loads every CSV file of an input directory into the store.

    The store handle is owned by the caller; files are processed one at a
    time and a failing file never stops the ones after it.
    """

    def __init__(self, store: IDocumentStore, catalog: Catalog, input_dir: Path) -> None:
        self._store = store
        self._catalog = catalog
        self._input_dir = Path(input_dir)

    def load_file(self, path: Path, collection: str | None = None,
                  outcome: LoadOutcome | None = None) -> LoadOutcome:
        """Parse, consolidate and write one file.

        Raises:
            NominaEtlError: Any file-level failure; nothing from this file is
                written if it is raised before the batch write.
        """
        collection = collection or path.stem
        config = self._catalog.config_for(collection)
        outcome = outcome or LoadOutcome(collection=collection, source_file=path.name)

        parsed = parse_csv(path, config)
        outcome.rows = parsed.row_count
        outcome.errors.extend(parsed.errors)
        if parsed.empty:
            if parsed.errors:
                raise NoValidRowsError(f"All {parsed.row_count} rows of {path.name} contained errors")
            logger.info("No valid data in {}", path.name)
            return outcome

        schema = infer_schema(parsed.records)
        logger.debug("Inferred schema for {}: {}", collection, schema)
        logger.debug(
            "{} of {} records match the schema of the first record",
            len(validate_records(parsed.records, schema)), len(parsed.records),
        )

        # Strategy is decided from the first parsed row, before grouping or skipping
        sample = parsed.records[0]
        records = parsed.records
        spec = config.consolidation
        if spec is not None:
            records = consolidate(records, spec)
            if spec.natural_key:
                records, skipped = skip_existing(
                    self._store, collection, records, spec.natural_key, config.id_field
                )
                outcome.duplicates += skipped
                if not records:
                    logger.info("All {} documents already exist in {}", skipped, collection)
                    return outcome

        strategy = select_strategy(self._store, collection, sample, config.id_field)
        return write_batch(self._store, collection, records, strategy, config.id_field, outcome)

    def clean_collection(self, collection: str) -> int:
        deleted = self._store.delete_all(collection)
        logger.info("Collection {} cleaned ({} documents removed)", collection, deleted)
        return deleted

    def run(self, *, clean: bool = False) -> RunReport:
        """Process all files and return the per-collection summary."""
        logger.info("Looking for files in: {}", self._input_dir.resolve())
        try:
            files = discover_files(self._input_dir)
        except InputLocationError as exc:
            logger.error("ETL run aborted: {}", exc)
            return RunReport(success=False, error=str(exc))

        if not files:
            logger.warning("No CSV files found in {}", self._input_dir)
            return RunReport(success=False, message="No CSV files")

        logger.info("Files to process: {}", ", ".join(p.name for p in files))
        report = RunReport()

        for path in files:
            collection = path.stem
            logger.info("--- Processing {} ---", path.name)
            outcome = LoadOutcome(collection=collection, source_file=path.name)
            try:
                if clean:
                    self.clean_collection(collection)
                self.load_file(path, collection, outcome)
            except NominaEtlError as exc:
                logger.error("Error processing {}: {}", path.name, exc)
                outcome.error = str(exc)
                outcome.errors.append(exc.located() if isinstance(exc, RowCoercionError) else str(exc))
            except Exception as exc:
                logger.exception("Unexpected error processing {}", path.name)
                outcome.error = f"{type(exc).__name__}: {exc}"
                outcome.errors.append(outcome.error)
            report.results[collection] = outcome

        report.success = not report.failed_collections
        logger.info("--- ETL summary ---")
        for outcome in report.results.values():
            log = logger.warning if outcome.failed else logger.info
            log("{}", outcome.summary_line())

        return report


def run_etl(settings: AppSettings | None = None, *, clean: bool = False,
            store: IDocumentStore | None = None) -> RunReport:
    """Open the configured store, run the ETL over ``settings.input_dir`` and close the store."""
    settings = settings or AppSettings()
    catalog = load_catalog(settings.catalog_path)
    with closing(store or create_store(settings)) as handle:
        return EtlRunner(handle, catalog, settings.input_dir).run(clean=clean)
