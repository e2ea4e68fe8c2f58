"""Command-line entry point.

Usage:
    nomina-etl run --input-dir raw-data --backend mongo
    nomina-etl clean nominas
"""

from __future__ import annotations

import argparse
import sys
from contextlib import closing
from pathlib import Path
from typing import Any

from loguru import logger

from nomina_etl.core.config import AppSettings
from nomina_etl.core.exceptions import NominaEtlError
from nomina_etl.core.logging import configure_logging
from nomina_etl.etl.catalog import load_catalog
from nomina_etl.etl.orchestrator import EtlRunner, run_etl
from nomina_etl.persistence import create_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nomina-etl", description="Load HR CSV exports into the document store")
    parser.add_argument("--backend", choices=["memory", "mongo", "dynamodb"], default=None,
                        help="Document store backend (default from NOMINA_ETL_BACKEND)")
    parser.add_argument("--log-level", default=None, help="Console log level")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Load every CSV file of the input directory")
    run.add_argument("--input-dir", type=Path, default=None, help="Directory holding the CSV files")
    run.add_argument("--catalog", type=Path, default=None, help="JSON file with collection configuration")
    run.add_argument("--clean", action="store_true", help="Empty each target collection before loading")

    clean = sub.add_parser("clean", help="Delete every document of a collection")
    clean.add_argument("collection")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    overrides: dict[str, Any] = {}
    if args.backend:
        overrides["backend"] = args.backend
    if args.log_level:
        overrides["log_level"] = args.log_level
    if getattr(args, "input_dir", None) is not None:
        overrides["input_dir"] = args.input_dir
    if getattr(args, "catalog", None) is not None:
        overrides["catalog_path"] = args.catalog
    return AppSettings(**overrides)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings)

    try:
        if args.command == "clean":
            with closing(create_store(settings)) as store:
                EtlRunner(store, load_catalog(settings.catalog_path), settings.input_dir).clean_collection(
                    args.collection
                )
            return 0

        report = run_etl(settings, clean=args.clean)
    except NominaEtlError as exc:
        logger.error("ETL failed: {}", exc)
        return 1
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
