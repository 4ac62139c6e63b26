"""
Component tests for the cart HTTP API.

Routers, CartService, CartRepo and the SQLite-backed models run for real;
only the redis lock service is replaced with an in-memory one.
"""
import pytest
from fastapi.testclient import TestClient

from bookcart.data.models.cart import CartModel
from bookcart.domain.cart import MAX_QUANTITY

SESSION = "guest-session-1"
USER_ID = 42


def add(client, product_id, quantity=1, session=SESSION, user_id=None):
    params = {"user_id": user_id} if user_id else None
    return client.post(
        f"/cart/{session}/items",
        json={"product_id": product_id, "quantity": quantity},
        params=params,
    )


class TestGetCart:
    def test_new_session_gets_empty_cart(self, test_client: TestClient):
        response = test_client.get(f"/cart/{SESSION}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] is not None
        assert data["items"] == []
        assert data["discount"] == 0
        assert data["subtotal"] == 0
        assert data["total"] == 0

    def test_same_session_returns_same_cart(self, test_client: TestClient):
        first = test_client.get(f"/cart/{SESSION}").json()
        second = test_client.get(f"/cart/{SESSION}").json()
        assert first["id"] == second["id"]

    def test_user_cart_is_separate_from_guest_cart(self, test_client: TestClient):
        add(test_client, 1)
        data = test_client.get(f"/cart/{SESSION}", params={"user_id": USER_ID}).json()
        assert data["items"] == []


class TestAddItem:
    def test_add_item_returns_display_view(self, test_client: TestClient):
        response = add(test_client, 1, 2)

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["productId"] == "1"
        assert item["quantity"] == 2
        assert item["name"] == "Fluent Python"
        assert item["price"] == 100.0
        assert item["image"] == "🐍"
        assert item["stock"] == 7
        assert item["id"]
        assert data["subtotal"] == 200.0
        assert data["total"] == 200.0

    def test_repeat_add_combines_lines(self, test_client: TestClient):
        add(test_client, 1, 2)
        data = add(test_client, 1, 3).json()

        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 5
        assert data["subtotal"] == 500.0

    def test_repeat_add_keeps_first_captured_price(self, test_client: TestClient, db_session):
        from bookcart.data.models.product import ProductModel

        add(test_client, 2, 1)
        product = db_session.get(ProductModel, 2)
        product.price = 75
        db_session.commit()

        data = add(test_client, 2, 1).json()

        assert data["items"][0]["price"] == 50.0
        assert data["subtotal"] == 100.0

    @pytest.mark.parametrize("quantity", [0, -3, "abc", None])
    def test_invalid_quantity_defaults_to_one(self, test_client: TestClient, quantity):
        response = add(test_client, 3, quantity)

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 1

    def test_negative_product_price_is_captured_as_zero(self, test_client: TestClient):
        data = add(test_client, 5, 2).json()
        assert data["items"][0]["price"] == 0.0
        assert data["total"] == 0.0

    @pytest.mark.parametrize("quantity", [1e300, "1e999999999", MAX_QUANTITY + 1])
    def test_out_of_range_quantity_defaults_to_one(self, test_client: TestClient, quantity):
        response = add(test_client, 1, quantity)

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 1

    def test_repeat_adds_stop_at_quantity_cap(self, test_client: TestClient):
        add(test_client, 3, MAX_QUANTITY)
        response = add(test_client, 3, MAX_QUANTITY)

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == MAX_QUANTITY

    def test_missing_product_id_is_rejected(self, test_client: TestClient):
        response = test_client.post(f"/cart/{SESSION}/items", json={"quantity": 1})
        assert response.status_code == 400
        assert response.json()["detail"] == "Brak ID produktu"

    def test_unknown_product_returns_404(self, test_client: TestClient):
        response = add(test_client, 999)
        assert response.status_code == 404
        assert response.json()["detail"] == "Produkt nie istnieje"

    def test_inactive_product_returns_404(self, test_client: TestClient):
        assert add(test_client, 6).status_code == 404

    def test_locked_cart_returns_409(self, test_client: TestClient, lock_service):
        lock_service.held[f"session:{SESSION}"] = "someone-else"

        response = add(test_client, 1)

        assert response.status_code == 409
        del lock_service.held[f"session:{SESSION}"]
        assert test_client.get(f"/cart/{SESSION}").json()["items"] == []

    def test_lock_is_released_after_request(self, test_client: TestClient, lock_service):
        add(test_client, 1)
        assert lock_service.held == {}
        assert lock_service.acquired == [f"session:{SESSION}"]


class TestUpdateAndRemove:
    def test_update_sets_quantity(self, test_client: TestClient):
        add(test_client, 1, 1)
        response = test_client.put(f"/cart/{SESSION}/items/1", json={"quantity": 4})

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 4
        assert response.json()["subtotal"] == 400.0

    def test_update_to_zero_removes_line(self, test_client: TestClient):
        add(test_client, 1, 1)
        add(test_client, 2, 1)

        data = test_client.put(f"/cart/{SESSION}/items/1", json={"quantity": 0}).json()

        assert [i["productId"] for i in data["items"]] == ["2"]
        assert data["subtotal"] == 50.0

    @pytest.mark.parametrize("quantity", [-1, "many", None, 1e300, "1e999999999", MAX_QUANTITY + 1])
    def test_update_rejects_invalid_quantity(self, test_client: TestClient, quantity):
        add(test_client, 1, 1)
        response = test_client.put(f"/cart/{SESSION}/items/1", json={"quantity": quantity})
        assert response.status_code == 400

    def test_update_absent_product_is_noop(self, test_client: TestClient):
        add(test_client, 1, 2)
        data = test_client.put(f"/cart/{SESSION}/items/3", json={"quantity": 5}).json()
        assert [(i["productId"], i["quantity"]) for i in data["items"]] == [("1", 2)]

    def test_remove_item(self, test_client: TestClient):
        add(test_client, 1, 1)
        add(test_client, 2, 1)

        data = test_client.delete(f"/cart/{SESSION}/items/1").json()

        assert [i["productId"] for i in data["items"]] == ["2"]

    def test_remove_absent_item_is_not_an_error(self, test_client: TestClient):
        response = test_client.delete(f"/cart/{SESSION}/items/123")
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_line_order_is_preserved(self, test_client: TestClient):
        for pid in (3, 1, 2):
            add(test_client, pid)
        test_client.put(f"/cart/{SESSION}/items/1", json={"quantity": 3})

        data = test_client.get(f"/cart/{SESSION}").json()
        assert [i["productId"] for i in data["items"]] == ["3", "1", "2"]


class TestDiscount:
    def test_save20_scenario(self, test_client: TestClient):
        add(test_client, 1, 2)
        data = add(test_client, 2, 1).json()
        assert data["subtotal"] == 250.0

        response = test_client.post(f"/cart/{SESSION}/discount", json={"code": "SAVE20"})

        assert response.status_code == 200
        data = response.json()
        assert data["discount"] == 20.0
        assert data["total"] == 200.0

    def test_invalid_code_returns_400_and_keeps_discount(self, test_client: TestClient):
        add(test_client, 1, 1)
        test_client.post(f"/cart/{SESSION}/discount", json={"code": "SAVE10"})

        response = test_client.post(f"/cart/{SESSION}/discount", json={"code": "BOGUS"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Nieprawidłowy kod rabatowy"
        data = test_client.get(f"/cart/{SESSION}").json()
        assert data["discount"] == 10.0
        assert data["total"] == 90.0

    def test_lowercase_code_is_invalid(self, test_client: TestClient):
        response = test_client.post(f"/cart/{SESSION}/discount", json={"code": "welcome"})
        assert response.status_code == 400


class TestClearCart:
    def test_clear_resets_items_and_discount(self, test_client: TestClient):
        add(test_client, 1, 2)
        test_client.post(f"/cart/{SESSION}/discount", json={"code": "WELCOME"})

        response = test_client.delete(f"/cart/{SESSION}")

        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["discount"] == 0
        assert data["subtotal"] == 0
        assert data["total"] == 0


class TestMerge:
    def test_merge_folds_guest_items_and_deletes_guest_cart(self, test_client: TestClient, db_session):
        add(test_client, 3, 1, user_id=USER_ID)
        add(test_client, 3, 2)
        add(test_client, 4, 1)

        response = test_client.post(f"/cart/{SESSION}/merge", params={"user_id": USER_ID})

        assert response.status_code == 200
        data = response.json()
        quantities = {i["productId"]: i["quantity"] for i in data["items"]}
        assert quantities == {"3": 3, "4": 1}
        assert data["subtotal"] == 35.0

        assert db_session.query(CartModel).filter(CartModel.session_id == SESSION).count() == 0

    def test_merge_deletes_empty_guest_cart(self, test_client: TestClient, db_session):
        test_client.get(f"/cart/{SESSION}")

        response = test_client.post(f"/cart/{SESSION}/merge", params={"user_id": USER_ID})

        assert response.status_code == 200
        assert db_session.query(CartModel).filter(CartModel.session_id == SESSION).count() == 0

    def test_merge_without_guest_cart_returns_user_cart(self, test_client: TestClient):
        add(test_client, 1, 1, user_id=USER_ID)

        data = test_client.post(f"/cart/unknown-session/merge", params={"user_id": USER_ID}).json()

        assert [(i["productId"], i["quantity"]) for i in data["items"]] == [("1", 1)]

    def test_merge_requires_user(self, test_client: TestClient):
        response = test_client.post(f"/cart/{SESSION}/merge")
        assert response.status_code == 401

    def test_replayed_merge_does_not_double_items(self, test_client: TestClient):
        add(test_client, 1, 1)
        test_client.post(f"/cart/{SESSION}/merge", params={"user_id": USER_ID})

        data = test_client.post(f"/cart/{SESSION}/merge", params={"user_id": USER_ID}).json()

        assert data["items"][0]["quantity"] == 1
