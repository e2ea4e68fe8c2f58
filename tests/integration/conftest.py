"""Integration test fixtures: LocalStack DynamoDB and a local MongoDB."""

from __future__ import annotations

import os

import boto3
import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from nomina_etl.etl.catalog import default_catalog
from nomina_etl.persistence.dynamodb_backend import create_tables

LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
MONGO_URI = os.environ.get("NOMINA_ETL_TEST_MONGO_URI", "mongodb://localhost:27017")
TABLE_PREFIX = "nomina-etl-"
TABLE_SUFFIX = "-inttest"
TEST_DATABASE = "eantion_inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except Exception:
        return False


def _mongo_available() -> bool:
    client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=500)
    try:
        client.admin.command("ping")
        return True
    except PyMongoError:
        return False
    finally:
        client.close()


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)

skip_no_mongo = pytest.mark.skipif(
    not _mongo_available(),
    reason="MongoDB not available",
)


@pytest.fixture(scope="session")
def localstack_ddb():
    """DynamoDB resource pointing at LocalStack."""
    return boto3.resource("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def catalog_tables(localstack_ddb):
    """One table per catalog collection, created once per session."""
    create_tables(localstack_ddb, sorted(default_catalog().collections),
                  prefix=TABLE_PREFIX, suffix=TABLE_SUFFIX)
    return TABLE_SUFFIX


@pytest.fixture
def mongo_database():
    """Name of a scratch database, dropped after the test."""
    yield TEST_DATABASE
    client = MongoClient(MONGO_URI)
    client.drop_database(TEST_DATABASE)
    client.close()
