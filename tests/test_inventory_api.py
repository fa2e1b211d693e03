"""Tests for the inventory collection endpoints."""

import pytest


def _create(http, **overrides):
    payload = {"product_name": "Widget", "quantity": 10, "price": 5.0, "cost": 2.5}
    payload.update(overrides)
    return http.post("/inventory/", json=payload)


class TestCreateInventoryItem:
    def test_create_assigns_id_and_defaults_supplier(self, http) -> None:
        resp = _create(http)

        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] == 1
        assert body["product_name"] == "Widget"
        assert body["supplier_id"] == 1

    def test_duplicate_name_is_unique_violation(self, http) -> None:
        assert _create(http).status_code == 201

        resp = _create(http, quantity=3)

        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["code"] == "23505"
        assert detail["message"] == "An item with this name already exists. Please use a unique name."

    def test_negative_quantity_rejected(self, http) -> None:
        resp = _create(http, quantity=-1)
        assert resp.status_code == 422

    def test_blank_name_rejected(self, http) -> None:
        resp = _create(http, product_name="   ")
        assert resp.status_code == 422

    @pytest.mark.parametrize("field", ["price", "cost"])
    def test_more_than_two_decimals_rejected(self, http, field) -> None:
        resp = _create(http, **{field: 5.555})

        assert resp.status_code == 422
        assert http.get("/inventory/").json() == []

    def test_amounts_round_trip(self, http) -> None:
        created = _create(http, price=5.55, cost=0.1).json()

        listed = http.get("/inventory/").json()

        assert listed == [created]
        assert (created["price"], created["cost"]) == (5.55, 0.1)

    def test_update_with_more_than_two_decimals_rejected(self, http) -> None:
        _create(http)

        assert http.patch("/inventory/1", json={"price": 1.005}).status_code == 422
        assert http.get("/inventory/1").json()["price"] == 5.0


class TestListInventory:
    def test_orders_by_field_and_direction(self, http) -> None:
        _create(http, product_name="b-gadget")
        _create(http, product_name="a-widget")
        _create(http, product_name="c-sprocket")

        by_name = http.get("/inventory/", params={"order": "product_name"}).json()
        by_id_desc = http.get("/inventory/", params={"order": "id", "ascending": "false"}).json()

        assert [r["product_name"] for r in by_name] == ["a-widget", "b-gadget", "c-sprocket"]
        assert [r["id"] for r in by_id_desc] == [3, 2, 1]

    def test_columns_selects_subset(self, http) -> None:
        _create(http)

        rows = http.get("/inventory/", params={"columns": "id,product_name,quantity,price"}).json()

        assert rows == [{"id": 1, "product_name": "Widget", "quantity": 10, "price": 5.0}]

    @pytest.mark.parametrize("params", [{"order": "nope"}, {"columns": "id,secret"}])
    def test_unknown_column_is_rejected(self, http, params) -> None:
        resp = http.get("/inventory/", params=params)

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "42703"

    def test_requires_authentication(self, anonymous_http) -> None:
        resp = anonymous_http.get("/inventory/")
        assert resp.status_code == 401


class TestUpdateInventoryItem:
    def test_partial_update_keeps_other_fields(self, http) -> None:
        _create(http)

        resp = http.patch("/inventory/1", json={"price": 6.5})

        assert resp.status_code == 200
        body = resp.json()
        assert body["price"] == 6.5
        assert body["quantity"] == 10
        assert body["product_name"] == "Widget"

    def test_missing_item_is_not_found(self, http) -> None:
        resp = http.patch("/inventory/99", json={"price": 1})

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "P0002"

    def test_rename_to_existing_name_is_unique_violation(self, http) -> None:
        _create(http)
        _create(http, product_name="Gadget")

        resp = http.patch("/inventory/2", json={"product_name": "Widget"})

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "23505"


class TestAdjustInventoryItem:
    def test_decrement(self, http) -> None:
        _create(http)

        resp = http.post("/inventory/1/adjust", json={"field": "quantity", "delta": -3})

        assert resp.status_code == 200
        assert resp.json()["quantity"] == 7

    def test_cannot_go_below_zero(self, http) -> None:
        _create(http)

        resp = http.post("/inventory/1/adjust", json={"field": "quantity", "delta": -11})

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "23514"
        assert http.get("/inventory/1").json()["quantity"] == 10

    def test_missing_item(self, http) -> None:
        resp = http.post("/inventory/5/adjust", json={"field": "quantity", "delta": 1})
        assert resp.status_code == 404

    def test_only_quantity_is_adjustable(self, http) -> None:
        _create(http)
        resp = http.post("/inventory/1/adjust", json={"field": "price", "delta": 1})
        assert resp.status_code == 422


class TestDeleteInventoryItem:
    def test_delete_then_not_found(self, http) -> None:
        _create(http)

        assert http.delete("/inventory/1").status_code == 204
        assert http.get("/inventory/1").status_code == 404
        assert http.delete("/inventory/1").status_code == 404

    def test_sales_survive_item_deletion(self, http) -> None:
        _create(http)
        http.post("/sales/", json={"product_id": 1, "quantity": 2, "price": 5.0})

        assert http.delete("/inventory/1").status_code == 204
        assert len(http.get("/sales/").json()) == 1
