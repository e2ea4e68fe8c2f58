"""Tests for the DynamoDB table creation script."""

from __future__ import annotations

import sys
from pathlib import Path

import boto3
from moto import mock_aws

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from create_dynamodb_tables import main  # noqa: E402

REGION = "us-east-1"


def test_creates_every_catalog_table(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["create_dynamodb_tables.py", "--table-suffix=-dev"])
    with mock_aws():
        main()
        names = boto3.client("dynamodb", region_name=REGION).list_tables()["TableNames"]
    assert sorted(names) == [
        "nomina-etl-conceptos-dev",
        "nomina-etl-contratos-dev",
        "nomina-etl-empleados-dev",
        "nomina-etl-nominas-dev",
        "nomina-etl-novedades-dev",
    ]
    assert "5 created, 0 already existed" in capsys.readouterr().out


def test_named_collections_only(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["create_dynamodb_tables.py", "nominas"])
    with mock_aws():
        main()
        main()
        names = boto3.client("dynamodb", region_name=REGION).list_tables()["TableNames"]
    assert names == ["nomina-etl-nominas"]
    assert "0 created, 1 already existed" in capsys.readouterr().out
