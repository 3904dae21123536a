"""Tests for API endpoints"""
import logging
import uuid
from unittest.mock import patch

API = "/api/v1"


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestAuthGate:

    def test_missing_token(self, client):
        response = client.get(f"{API}/cart")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}

    def test_bad_signature(self, client, user, make_token):
        token = make_token(user.id, secret="someone-else")
        response = client.get(f"{API}/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_non_uuid_subject(self, client, make_token):
        token = make_token("user-123")
        response = client.get(f"{API}/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_user_is_provisioned(self, client, make_token):
        subject = uuid.uuid4()
        headers = {"Authorization": f"Bearer {make_token(subject, 'new@example.com')}"}

        response = client.get(f"{API}/cart", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["userId"] == str(subject)

    def test_no_cart_logic_for_guests(self, client, phone):
        with patch("app.routers.cart.service.add_item") as add_item:
            response = client.post(f"{API}/cart/add", json={"productId": str(phone.id)})
        assert response.status_code == 401
        add_item.assert_not_called()


class TestAddItem:

    def test_created_with_envelope(self, client, auth_headers, user, phone):
        response = client.post(
            f"{API}/cart/add",
            json={"productId": str(phone.id), "quantity": 2},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Item added to cart successfully"
        cart = body["data"]
        assert cart["userId"] == str(user.id)
        assert cart["status"] == "active"
        assert cart["totalItems"] == 2
        item = cart["items"][0]
        assert item["productId"] == str(phone.id)
        assert item["quantity"] == 2
        assert item["product"]["name"] == "Galaxy Phone"
        assert item["product"]["discountPercentage"] == 10.0
        assert item["catalogProduct"] == {"id": str(phone.id), "name": "Galaxy Phone", "price": 499.0}
        assert "addedAt" in item

    def test_merges_repeated_adds(self, client, auth_headers, phone):
        for qty in (2, 3):
            client.post(f"{API}/cart/add", json={"productId": str(phone.id), "quantity": qty}, headers=auth_headers)

        cart = client.get(f"{API}/cart", headers=auth_headers).json()["data"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 5

    def test_missing_product_id(self, client, auth_headers):
        response = client.post(f"{API}/cart/add", json={"quantity": 1}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "ProductId is required"}

    def test_missing_body(self, client, auth_headers):
        response = client.post(f"{API}/cart/add", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_product(self, client, auth_headers):
        response = client.post(f"{API}/cart/add", json={"productId": str(uuid.uuid4())}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_supplied_product_override(self, client, auth_headers):
        response = client.post(
            f"{API}/cart/add",
            json={"productId": str(uuid.uuid4()), "product": {"_id": "ext-1", "title": "Feed Hat", "price": 20}},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["items"][0]["product"]["title"] == "Feed Hat"

    def test_unusable_supplied_product_for_unknown_id(self, client, auth_headers):
        response = client.post(
            f"{API}/cart/add",
            json={"productId": str(uuid.uuid4()), "product": {"foo": 1}},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found"}

    def test_quantity_too_large_for_storage(self, client, auth_headers, phone):
        response = client.post(
            f"{API}/cart/add",
            json={"productId": str(phone.id), "quantity": 10**30},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert client.get(f"{API}/cart", headers=auth_headers).json()["data"]["items"] == []

    def test_repeated_adds_past_the_maximum(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id), "quantity": 2**31 - 1}, headers=auth_headers)

        response = client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)

        assert response.status_code == 400
        cart = client.get(f"{API}/cart", headers=auth_headers).json()["data"]
        assert cart["items"][0]["quantity"] == 2**31 - 1

    def test_unexpected_failure(self, client, auth_headers, phone):
        with patch("app.routers.cart.service.add_item", side_effect=RuntimeError("boom")):
            response = client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error", "error": "boom"}

    def test_unexpected_failure_is_logged_with_request_line(self, client, auth_headers, phone, caplog):
        with patch("app.routers.cart.service.add_item", side_effect=RuntimeError("boom")):
            with caplog.at_level(logging.ERROR, logger="uvicorn"):
                client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)

        record = next(r for r in caplog.records if r.name == "uvicorn" and r.levelno == logging.ERROR)
        assert record.msg == "Unexpected error on %s %s"
        assert record.args == ("POST", f"{API}/cart/add")
        assert record.exc_info is not None


class TestGetCart:

    def test_empty(self, client, auth_headers, user):
        response = client.get(f"{API}/cart", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Cart is empty"
        assert body["data"]["items"] == []
        assert body["data"]["totalItems"] == 0
        assert body["data"]["status"] == "active"
        assert body["data"]["userId"] == str(user.id)


class TestUpdateRemoveClear:

    def test_update_overwrites(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id), "quantity": 2}, headers=auth_headers)

        response = client.put(f"{API}/cart/update", json={"productId": str(phone.id), "quantity": 5}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Cart updated successfully"
        assert response.json()["data"]["items"][0]["quantity"] == 5

    def test_update_rejects_zero(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)

        response = client.put(f"{API}/cart/update", json={"productId": str(phone.id), "quantity": 0}, headers=auth_headers)

        assert response.status_code == 400

    def test_update_without_cart(self, client, auth_headers, phone):
        response = client.put(f"{API}/cart/update", json={"productId": str(phone.id), "quantity": 2}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"

    def test_remove(self, client, auth_headers, phone, lamp):
        for product in (phone, lamp):
            client.post(f"{API}/cart/add", json={"productId": str(product.id)}, headers=auth_headers)

        response = client.delete(f"{API}/cart/remove/{phone.id}", headers=auth_headers)

        assert response.status_code == 200
        assert [it["productId"] for it in response.json()["data"]["items"]] == [str(lamp.id)]

    def test_remove_missing_item(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)

        response = client.delete(f"{API}/cart/remove/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"

    def test_remove_unparseable_id(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)

        response = client.delete(f"{API}/cart/remove/abc", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Item not found in cart"}

    def test_remove_unparseable_id_without_cart(self, client, auth_headers):
        response = client.delete(f"{API}/cart/remove/abc", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Cart not found"}

    def test_clear(self, client, auth_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id), "quantity": 3}, headers=auth_headers)

        response = client.delete(f"{API}/cart/clear", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["totalItems"] == 0
        assert data["status"] == "active"

    def test_clear_without_cart(self, client, auth_headers):
        response = client.delete(f"{API}/cart/clear", headers=auth_headers)
        assert response.status_code == 404


class TestListAllCarts:

    def test_requires_admin(self, client, auth_headers):
        response = client.get(f"{API}/carts", headers=auth_headers)
        assert response.status_code == 403

    def test_lists_every_cart(self, client, auth_headers, admin_headers, phone):
        client.post(f"{API}/cart/add", json={"productId": str(phone.id)}, headers=auth_headers)
        client.post(f"{API}/cart/add", json={"productId": str(phone.id), "quantity": 2}, headers=admin_headers)

        response = client.get(f"{API}/carts", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert {c["owner"]["email"] for c in body["data"]} == {"shopper@example.com", "ops@example.com"}


class TestProducts:

    def test_list(self, client, phone, lamp):
        response = client.get(f"{API}/products")
        assert response.status_code == 200
        assert {p["id"] for p in response.json()} == {str(phone.id), str(lamp.id)}

    def test_get(self, client, lamp):
        response = client.get(f"{API}/products/{lamp.id}")
        assert response.status_code == 200
        assert response.json()["title"] == "Desk Lamp"

    def test_get_unknown(self, client):
        response = client.get(f"{API}/products/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found"}
