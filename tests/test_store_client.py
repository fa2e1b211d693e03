"""Tests for RecordStoreClient."""

from unittest.mock import MagicMock

import pytest
import requests

from ims_client.errors import (
    ConstraintError,
    NotFoundError,
    PermissionDeniedError,
    TransportError,
    ValidationError,
)
from ims_client.store import RecordStoreClient

from conftest import BASE_URL

NEW_ITEM = {"product_name": "Widget", "quantity": 10, "price": 5.0, "cost": 2.5, "supplier_id": 1}


class TestRoundTrip:
    def test_insert_then_list_returns_same_record(self, store) -> None:
        created = store.insert("inventory", NEW_ITEM)

        rows = store.list("inventory")

        assert len(rows) == 1
        assert isinstance(rows[0]["id"], int)
        assert {k: v for k, v in rows[0].items() if k != "id"} == NEW_ITEM
        assert rows[0] == created

    def test_list_order_and_columns(self, store) -> None:
        store.insert("inventory", {**NEW_ITEM, "product_name": "b"})
        store.insert("inventory", {**NEW_ITEM, "product_name": "a"})

        rows = store.list("inventory", order_by="product_name", ascending=False, columns=["id", "product_name"])

        assert rows == [{"id": 1, "product_name": "b"}, {"id": 2, "product_name": "a"}]

    def test_update_and_delete(self, store) -> None:
        store.insert("inventory", NEW_ITEM)

        updated = store.update("inventory", 1, {"quantity": 4})
        assert updated["quantity"] == 4

        assert store.delete("inventory", 1) is None
        assert store.list("inventory") == []

    def test_adjust_is_relative(self, store) -> None:
        store.insert("inventory", NEW_ITEM)

        assert store.adjust("inventory", 1, "quantity", -4)["quantity"] == 6
        assert store.adjust("inventory", 1, "quantity", 2)["quantity"] == 8


class TestClassifiedFailures:
    def test_duplicate_name(self, store) -> None:
        store.insert("inventory", NEW_ITEM)

        with pytest.raises(ConstraintError) as exc_info:
            store.insert("inventory", NEW_ITEM)

        assert exc_info.value.code == "23505"
        assert exc_info.value.message == "An item with this name already exists. Please use a unique name."

    def test_update_missing_row(self, store) -> None:
        with pytest.raises(NotFoundError):
            store.update("inventory", 7, {"quantity": 1})

    def test_unauthenticated(self, anonymous_http) -> None:
        client = RecordStoreClient(base_url=BASE_URL, session=anonymous_http)

        with pytest.raises(PermissionDeniedError):
            client.list("inventory")

    def test_blank_collection_fails_locally(self) -> None:
        session = MagicMock()
        client = RecordStoreClient(base_url=BASE_URL, session=session)

        with pytest.raises(ValidationError):
            client.list("  ")
        session.request.assert_not_called()


class TestTransport:
    def test_unreachable_backend(self) -> None:
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("connection refused")
        client = RecordStoreClient(base_url="http://ims.invalid", session=session)

        with pytest.raises(TransportError) as exc_info:
            client.list("inventory")

        assert "connection refused" in exc_info.value.message
        assert session.request.call_count == 1

    def test_timeout_is_not_retried(self) -> None:
        session = MagicMock()
        session.request.side_effect = requests.Timeout("read timed out")
        client = RecordStoreClient(base_url="http://ims.invalid", session=session, timeout=5)

        with pytest.raises(TransportError):
            client.insert("inventory", NEW_ITEM)

        assert session.request.call_count == 1
        assert session.request.call_args.kwargs["timeout"] == 5

    def test_non_json_success_body(self) -> None:
        resp = MagicMock(status_code=200, content=b"<html>")
        resp.json.side_effect = ValueError("no json")
        session = MagicMock()
        session.request.return_value = resp
        client = RecordStoreClient(base_url="http://ims.invalid", session=session)

        with pytest.raises(TransportError):
            client.list("inventory")

    def test_bearer_token_is_sent(self) -> None:
        resp = MagicMock(status_code=200, content=b"[]")
        resp.json.return_value = []
        session = MagicMock()
        session.request.return_value = resp
        client = RecordStoreClient(base_url="http://ims.invalid/", token="abc", session=session)

        client.list("sales", order_by="id", ascending=False)

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://ims.invalid/sales/")
        assert kwargs["headers"]["Authorization"] == "Bearer abc"
        assert kwargs["params"] == {"order": "id", "ascending": "false"}
