"""DynamoDB backend implementing IDocumentStore.

One table per collection, partition key ``_id`` (string). ObjectIds and
datetimes are stored as strings, floats as Decimal.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from functools import reduce
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError
from bson import ObjectId

from nomina_etl.core.exceptions import StoreError, WriteError
from nomina_etl.models.outcome import BulkWriteResult

KEY = "_id"

# Per-item failures; anything else aborts the batch.
ITEM_ERROR_CODES = frozenset({"ValidationException", "ItemCollectionSizeLimitExceededException"})


def to_dynamodb(obj: Any) -> Any:
    """Convert document values into types DynamoDB accepts."""
    if isinstance(obj, bool) or obj is None:
        return obj
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: to_dynamodb(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dynamodb(i) for i in obj]
    return obj


def decode_decimals(obj: Any) -> Any:
    """Convert Decimal values in a DynamoDB item back to int/float."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: decode_decimals(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [decode_decimals(i) for i in obj]
    return obj


def table_name(collection: str, prefix: str = "", suffix: str = "") -> str:
    return f"{prefix}{collection}{suffix}"


def create_tables(ddb: Any, collections: list[str], prefix: str = "", suffix: str = "") -> list[str]:
    """Create one table per collection. Skips tables that already exist.

    Returns:
        Names of the tables created by this call.
    """
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])
    created: list[str] = []

    for collection in collections:
        name = table_name(collection, prefix, suffix)
        if name in existing:
            continue
        client.create_table(
            TableName=name,
            KeySchema=[{"AttributeName": KEY, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": KEY, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        created.append(name)
    return created


class DynamoDBDocumentStore:
    """IDocumentStore backed by DynamoDB tables keyed on ``_id``."""

    def __init__(self, table_prefix: str = "", table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_prefix = table_prefix
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, collection: str):
        return self._ddb.Table(table_name(collection, self._table_prefix, self._table_suffix))

    def _scan(self, collection: str, **kwargs: Any):
        """Yield scan pages until LastEvaluatedKey runs out."""
        tbl = self._table(collection)
        while True:
            resp = tbl.scan(**kwargs)
            yield resp
            last = resp.get("LastEvaluatedKey")
            if not last:
                return
            kwargs["ExclusiveStartKey"] = last

    def count(self, collection: str) -> int:
        try:
            return sum(page.get("Count", 0) for page in self._scan(collection, Select="COUNT"))
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(collection, str(exc)) from exc

    def _put(self, collection: str, item: dict[str, Any], result: BulkWriteResult, index: int,
             **kwargs: Any) -> dict[str, Any] | None:
        """Put one item; record per-item failures, raise on structural ones."""
        try:
            return self._table(collection).put_item(Item=item, **kwargs)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            message = f"Document {index}: {exc.response.get('Error', {}).get('Message', code)}"
            if code == "ConditionalCheckFailedException":
                result.duplicate_keys += 1
                result.duplicate_errors.append(message)
            elif code in ITEM_ERROR_CODES:
                result.errors.append(message)
            else:
                raise WriteError(collection, str(exc)) from exc
        except BotoCoreError as exc:
            raise WriteError(collection, str(exc)) from exc
        except TypeError as exc:
            # boto3 serializer rejects values DynamoDB cannot store (Infinity, NaN)
            raise WriteError(collection, f"Document {index}: {exc}") from exc
        return None

    def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> BulkWriteResult:
        result = BulkWriteResult()
        for index, doc in enumerate(documents):
            item = to_dynamodb(doc)
            if item.get(KEY) is None:
                item[KEY] = str(ObjectId())
            resp = self._put(collection, item, result, index,
                             ConditionExpression=Attr(KEY).not_exists())
            if resp is not None:
                result.inserted += 1
        return result

    def upsert_many(
        self, collection: str, documents: list[dict[str, Any]], id_field: str = "_id"
    ) -> BulkWriteResult:
        if id_field != KEY:
            raise WriteError(collection, f"DynamoDB tables are keyed on {KEY}, not {id_field}")
        result = BulkWriteResult()
        for index, doc in enumerate(documents):
            if doc.get(KEY) is None:
                inserted = self.insert_many(collection, [doc])
                result.inserted += inserted.inserted
                result.errors.extend(inserted.errors)
                continue
            item = to_dynamodb(doc)
            resp = self._put(collection, item, result, index, ReturnValues="ALL_OLD")
            if resp is None:
                continue
            old = resp.get("Attributes")
            if not old:
                result.upserted += 1
            elif old == item:
                result.matched += 1
            else:
                result.modified += 1
        return result

    def find_one(self, collection: str, criteria: dict[str, Any]) -> dict[str, Any] | None:
        encoded = to_dynamodb(criteria)
        try:
            if set(encoded) == {KEY}:
                item = self._table(collection).get_item(Key={KEY: encoded[KEY]}).get("Item")
                return decode_decimals(item) if item else None
            scan_kwargs: dict[str, Any] = {}
            if encoded:
                scan_kwargs["FilterExpression"] = reduce(
                    lambda acc, cond: acc & cond,
                    [Attr(path).eq(value) for path, value in encoded.items()],
                )
            for page in self._scan(collection, **scan_kwargs):
                items = page.get("Items", [])
                if items:
                    return decode_decimals(items[0])
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(collection, str(exc)) from exc
        return None

    def delete_all(self, collection: str) -> int:
        deleted = 0
        try:
            keys = [
                item[KEY]
                for page in self._scan(collection, ProjectionExpression="#k",
                                       ExpressionAttributeNames={"#k": KEY})
                for item in page.get("Items", [])
            ]
            with self._table(collection).batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key={KEY: key})
                    deleted += 1
        except (ClientError, BotoCoreError) as exc:
            raise WriteError(collection, str(exc)) from exc
        return deleted

    def close(self) -> None:
        # boto3 resources hold no connection that needs releasing
        pass
