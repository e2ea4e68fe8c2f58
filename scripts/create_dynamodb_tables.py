"""Create one DynamoDB table per catalog collection.

Usage:
    python scripts/create_dynamodb_tables.py --endpoint-url http://localhost:4566
    python scripts/create_dynamodb_tables.py --table-suffix=-dev nominas

A suffix starting with "-" must be joined with "=", otherwise argparse reads
it as another option.
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

from nomina_etl.etl.catalog import default_catalog
from nomina_etl.persistence.dynamodb_backend import create_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Create DynamoDB tables for nomina-etl")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-prefix", default="nomina-etl-", help="Table name prefix")
    parser.add_argument("--table-suffix", default="",
                        help="Table name suffix; use --table-suffix=-dev when it starts with '-'")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("collections", nargs="*", help="Collections (default: every catalog collection)")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)
    collections = args.collections or sorted(default_catalog().collections)

    print("Creating tables...")
    created = create_tables(ddb, collections, prefix=args.table_prefix, suffix=args.table_suffix)
    for name in created:
        print(f"  Created table {name}")
    print(f"Done! {len(created)} created, {len(collections) - len(created)} already existed")


if __name__ == "__main__":
    main()
