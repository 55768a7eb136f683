"""
Unit tests for the key-value storage backends
"""
import threading
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from interactive_lesson.config import AppConfig
from interactive_lesson.services.storage_service import (
    DynamoDBKeyValueStore,
    InMemoryKeyValueStore,
    create_store,
    user_scope,
)
from interactive_lesson.utils.errors import PersistenceError


def _client_error(code="ResourceNotFoundException", operation="GetItem"):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class TestInMemoryKeyValueStore:
    """Test the in-memory backend"""

    def test_get_missing_returns_none(self):
        store = InMemoryKeyValueStore()
        assert store.get("user:1", "quiz_score") is None

    def test_set_overwrites(self):
        store = InMemoryKeyValueStore()
        store.set("user:1", "k", "a")
        store.set("user:1", "k", "b")
        assert store.get("user:1", "k") == "b"

    def test_scopes_are_isolated(self):
        store = InMemoryKeyValueStore()
        store.set("user:1", "k", "a")
        assert store.get("user:2", "k") is None

    def test_increment_starts_from_zero(self):
        store = InMemoryKeyValueStore()
        assert store.increment("user:1", "quiz_score") == 1
        assert store.increment("user:1", "quiz_score", 2) == 3
        assert store.get("user:1", "quiz_score") == "3"

    def test_items_filters_prefix_in_insertion_order(self):
        store = InMemoryKeyValueStore()
        store.set("user:1", "quiz_answer_b", "2")
        store.set("user:1", "quiz_score", "1")
        store.set("user:1", "quiz_answer_a", "1")
        assert store.items("user:1", "quiz_answer_") == [
            ("quiz_answer_b", "2"),
            ("quiz_answer_a", "1"),
        ]

    def test_items_unknown_scope_is_empty(self):
        assert InMemoryKeyValueStore().items("user:9") == []

    def test_concurrent_increments_are_not_lost(self):
        store = InMemoryKeyValueStore()

        def bump():
            for _ in range(200):
                store.increment("user:1", "quiz_score")

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get("user:1", "quiz_score") == "1600"

    def test_user_scope(self):
        assert user_scope("42") == "user:42"


class TestDynamoDBKeyValueStore:
    """Test the DynamoDB backend against a mocked table"""

    @pytest.fixture
    def table(self):
        return MagicMock()

    @pytest.fixture
    def store(self, table):
        return DynamoDBKeyValueStore("lesson_meta", table=table)

    def test_get_returns_value(self, store, table):
        table.get_item.return_value = {"Item": {"scope": "user:1", "key": "k", "value": "4"}}
        assert store.get("user:1", "k") == "4"
        table.get_item.assert_called_once_with(Key={"scope": "user:1", "key": "k"})

    def test_get_converts_decimal_counters(self, store, table):
        table.get_item.return_value = {"Item": {"scope": "user:1", "key": "quiz_score", "value": Decimal("3")}}
        assert store.get("user:1", "quiz_score") == "3"

    def test_get_missing_item(self, store, table):
        table.get_item.return_value = {}
        assert store.get("user:1", "k") is None

    def test_set_puts_item(self, store, table):
        store.set("user:1", "quiz_answer_abc", "4")
        table.put_item.assert_called_once_with(
            Item={"scope": "user:1", "key": "quiz_answer_abc", "value": "4"}
        )

    def test_increment_uses_atomic_add(self, store, table):
        table.update_item.return_value = {"Attributes": {"value": Decimal("5")}}
        assert store.increment("user:1", "quiz_score") == 5
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"scope": "user:1", "key": "quiz_score"}
        assert kwargs["UpdateExpression"] == "ADD #value :amount"
        assert kwargs["ExpressionAttributeValues"] == {":amount": 1}

    def test_items_follows_pagination(self, store, table):
        table.query.side_effect = [
            {
                "Items": [{"scope": "user:1", "key": "quiz_answer_a", "value": "1"}],
                "LastEvaluatedKey": {"scope": "user:1", "key": "quiz_answer_a"},
            },
            {"Items": [{"scope": "user:1", "key": "quiz_answer_b", "value": "2"}]},
        ]
        assert store.items("user:1", "quiz_answer_") == [
            ("quiz_answer_a", "1"),
            ("quiz_answer_b", "2"),
        ]
        assert table.query.call_count == 2
        second_call = table.query.call_args_list[1].kwargs
        assert second_call["ExclusiveStartKey"] == {"scope": "user:1", "key": "quiz_answer_a"}

    def test_client_error_becomes_persistence_error(self, store, table):
        table.get_item.side_effect = _client_error()
        with pytest.raises(PersistenceError) as exc_info:
            store.get("user:1", "k")
        assert exc_info.value.status_code == 500
        assert exc_info.value.code == "persistence_error"

    def test_put_failure_becomes_persistence_error(self, store, table):
        table.put_item.side_effect = _client_error("ProvisionedThroughputExceededException", "PutItem")
        with pytest.raises(PersistenceError):
            store.set("user:1", "k", "v")


class TestCreateStore:
    """Test backend selection"""

    def test_memory_is_default(self):
        assert isinstance(create_store(AppConfig()), InMemoryKeyValueStore)

    @patch("interactive_lesson.services.storage_service.dynamodb_resource")
    def test_dynamodb_backend(self, mock_resource):
        store = create_store(AppConfig(storage_backend="dynamodb", meta_table="meta", aws_region="eu-west-1"))
        assert isinstance(store, DynamoDBKeyValueStore)
        mock_resource.assert_called_once_with("eu-west-1", None)
        mock_resource.return_value.Table.assert_called_once_with("meta")
