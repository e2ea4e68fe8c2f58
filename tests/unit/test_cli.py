"""Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from nomina_etl.cli import build_parser, main, settings_from_args
from tests.fakes import MemoryDocumentStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("NOMINA_ETL_BACKEND", raising=False)


class TestParser:
    def test_run_options(self):
        args = build_parser().parse_args(
            ["--backend", "memory", "run", "--input-dir", "datos", "--catalog", "c.json", "--clean"]
        )
        settings = settings_from_args(args)
        assert settings.backend == "memory"
        assert settings.input_dir == Path("datos")
        assert settings.catalog_path == Path("c.json")
        assert args.clean

    def test_defaults_come_from_settings(self):
        settings = settings_from_args(build_parser().parse_args(["run"]))
        assert settings.backend == "mongo"
        assert settings.input_dir == Path("raw-data")

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_run_success(self, write_csv, tmp_path):
        write_csv("pagos.csv", "id,monto", "P1,10")
        assert main(["--backend", "memory", "run", "--input-dir", str(tmp_path)]) == 0

    def test_run_with_failed_file(self, write_csv, tmp_path):
        write_csv("pagos.csv", "_id,monto", "no-es-id,10")
        assert main(["--backend", "memory", "run", "--input-dir", str(tmp_path)]) == 1

    def test_missing_input_dir(self, tmp_path):
        assert main(["--backend", "memory", "run", "--input-dir", str(tmp_path / "nada")]) == 1

    def test_bad_catalog(self, tmp_path):
        catalog = tmp_path / "catalog.json"
        catalog.write_text('{"default": {"field_types": {"a": "money"}}}', encoding="utf-8")
        assert main(["--backend", "memory", "run", "--input-dir", str(tmp_path), "--catalog", str(catalog)]) == 1

    def test_clean_command(self):
        store = MemoryDocumentStore()
        store.insert_many("nominas", [{"_id": "N1"}])
        with patch("nomina_etl.cli.create_store", return_value=store):
            assert main(["clean", "nominas"]) == 0
        assert store.count("nominas") == 0
        assert store.closed
