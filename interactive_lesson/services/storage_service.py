"""
Key-value storage backends.

Quiz answers, scores and site settings are all persisted through a small
scoped key-value interface, the same shape as WordPress user meta and
options: a *scope* (``user:<id>`` or ``site``) holds string values under
string keys. Two backends are provided:

* ``InMemoryKeyValueStore`` keeps everything in process memory; it is the
  default and what the tests use.
* ``DynamoDBKeyValueStore`` stores one item per (scope, key) in a DynamoDB
  table with ``scope`` as hash key and ``key`` as range key.

Backend failures are raised as ``PersistenceError``.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Protocol, Tuple

from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError
from starlette.requests import Request

from ..aws_clients import dynamodb_resource
from ..config import AppConfig
from ..utils.errors import PersistenceError

logger = logging.getLogger(__name__)

SITE_SCOPE = "site"


def user_scope(user_id: str) -> str:
    return f"user:{user_id}"


class KeyValueStore(Protocol):
    """Protocol defining the interface for key-value storage backends."""

    def get(self, scope: str, key: str) -> Optional[str]:
        """Return the value stored under ``key`` in ``scope``, or ``None``."""
        ...

    def set(self, scope: str, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def increment(self, scope: str, key: str, amount: int = 1) -> int:
        """Atomically add ``amount`` to the integer stored under ``key``.

        A missing key counts as 0. Returns the new value.
        """
        ...

    def items(self, scope: str, prefix: str = "") -> List[Tuple[str, str]]:
        """Return ``(key, value)`` pairs in ``scope`` whose key starts with ``prefix``."""
        ...


class InMemoryKeyValueStore:
    """Process-local backend. Keys keep their insertion order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, str]] = defaultdict(dict)

    def get(self, scope: str, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(scope, {}).get(key)

    def set(self, scope: str, key: str, value: str) -> None:
        with self._lock:
            self._data[scope][key] = value

    def increment(self, scope: str, key: str, amount: int = 1) -> int:
        with self._lock:
            bucket = self._data[scope]
            try:
                current = int(bucket.get(key) or 0)
            except ValueError:
                current = 0
            bucket[key] = str(current + amount)
            return current + amount

    def items(self, scope: str, prefix: str = "") -> List[Tuple[str, str]]:
        with self._lock:
            return [(k, v) for k, v in self._data.get(scope, {}).items() if k.startswith(prefix)]

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class DynamoDBKeyValueStore:
    """DynamoDB backend: hash key ``scope``, range key ``key``, attribute ``value``."""

    def __init__(self, table_name: str, table=None, region: str | None = None, endpoint_url: str | None = None):
        self.table_name = table_name
        self._table = table if table is not None else dynamodb_resource(region, endpoint_url).Table(table_name)

    def _fail(self, operation: str, exc: Exception) -> PersistenceError:
        if isinstance(exc, ClientError):
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
        else:
            error_code = type(exc).__name__
        logger.error(f"DynamoDB {operation} failed on {self.table_name}: {error_code} - {exc}")
        return PersistenceError(
            "Storage is unavailable. Please try again later.",
            data={"operation": operation},
        )

    def get(self, scope: str, key: str) -> Optional[str]:
        try:
            response = self._table.get_item(Key={"scope": scope, "key": key})
        except (ClientError, BotoCoreError) as e:
            raise self._fail("get_item", e) from e
        item = response.get("Item")
        if not item:
            return None
        value = item.get("value")
        if value is None:
            return None
        # Numeric attributes come back as Decimal.
        return str(int(value)) if isinstance(value, Decimal) else str(value)

    def set(self, scope: str, key: str, value: str) -> None:
        try:
            self._table.put_item(Item={"scope": scope, "key": key, "value": value})
        except (ClientError, BotoCoreError) as e:
            raise self._fail("put_item", e) from e

    def increment(self, scope: str, key: str, amount: int = 1) -> int:
        # Counters are stored as a numeric ``value`` so ADD stays atomic server-side.
        try:
            response = self._table.update_item(
                Key={"scope": scope, "key": key},
                UpdateExpression="ADD #value :amount",
                ExpressionAttributeNames={"#value": "value"},
                ExpressionAttributeValues={":amount": amount},
                ReturnValues="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as e:
            raise self._fail("update_item", e) from e
        return int(response.get("Attributes", {}).get("value", 0))

    def items(self, scope: str, prefix: str = "") -> List[Tuple[str, str]]:
        condition = Key("scope").eq(scope)
        if prefix:
            condition = condition & Key("key").begins_with(prefix)

        results: List[Tuple[str, str]] = []
        kwargs = {"KeyConditionExpression": condition}
        try:
            while True:
                response = self._table.query(**kwargs)
                for item in response.get("Items", []):
                    value = item.get("value", "")
                    if isinstance(value, Decimal):
                        value = int(value)
                    results.append((str(item["key"]), str(value)))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise self._fail("query", e) from e
        return results


def create_store(config: AppConfig) -> KeyValueStore:
    """Build the storage backend selected by ``config.storage_backend``."""
    if config.storage_backend == "dynamodb":
        logger.info(f"Initializing DynamoDB storage backend (table={config.meta_table})")
        return DynamoDBKeyValueStore(
            config.meta_table,
            region=config.aws_region,
            endpoint_url=config.aws_endpoint_url,
        )
    logger.info("Initializing in-memory storage backend (default)")
    return InMemoryKeyValueStore()


def get_store(request: Request) -> KeyValueStore:
    """FastAPI dependency returning the store the application was built with."""
    return request.app.state.store
