"""Integration tests for the checkout endpoints."""

from protean import current_domain
from storefront.catalogue.product import Product
from storefront.order.order import Order


def _fill_cart(client, headers, product_id, quantity=2):
    client.post("/api/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)


class TestCheckoutSessionApi:
    def test_session_requires_cart(self, client, member):
        response = client.get("/api/checkout/session", headers=member)
        assert response.status_code == 404
        assert response.json()["message"] == "No active checkout session found"

    def test_initialize(self, client, member, product_id):
        _fill_cart(client, member, product_id)
        response = client.post("/api/checkout/initialize", headers=member)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 64.0
        assert data["cart"]["item_count"] == 2

    def test_initialize_empty_cart(self, client, member):
        response = client.post("/api/checkout/initialize", headers=member)
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_CART"

    def test_shipping_and_discount(self, client, member, product_id):
        _fill_cart(client, member, product_id)

        shipping = client.put("/api/checkout/shipping", json={"shipping_method": "express"}, headers=member)
        assert shipping.json()["data"]["shipping"] == 20.0

        discount = client.post("/api/checkout/discount", json={"code": "welcome10"}, headers=member)
        assert discount.json()["message"] == "Discount code applied"
        assert discount.json()["data"]["discount"] == 5.0
        assert discount.json()["data"]["total"] == 69.0

    def test_unknown_shipping_method(self, client, member, product_id):
        _fill_cart(client, member, product_id)
        response = client.put("/api/checkout/shipping", json={"shipping_method": "teleport"}, headers=member)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "shipping_method"


class TestProcessCheckoutApi:
    def test_places_order(self, client, member, product_id, shipping_address):
        _fill_cart(client, member, product_id)
        response = client.post(
            "/api/checkout/process",
            json={"shipping_address": shipping_address, "payment_method": "credit-card"},
            headers=member,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order placed successfully"
        assert body["data"]["customer_email"] == "ada@example.com"
        assert body["data"]["customer_name"] == "Ada Lovelace"
        assert body["data"]["total"] == 64.0

        assert current_domain.repository_for(Product).get(product_id).stock_quantity == 8
        assert current_domain.repository_for(Order).get(body["data"]["order_id"]).user_id == "user-001"

    def test_guest_checkout_uses_supplied_email(self, client, guest, product_id, shipping_address):
        _fill_cart(client, guest, product_id, quantity=1)
        response = client.post(
            "/api/checkout/process",
            json={
                "shipping_address": shipping_address,
                "payment_method": "paypal",
                "customer_email": "guest@example.com",
            },
            headers=guest,
        )
        assert response.status_code == 201
        assert response.json()["data"]["customer_email"] == "guest@example.com"

    def test_missing_shipping_address(self, client, member, product_id):
        _fill_cart(client, member, product_id)
        response = client.post("/api/checkout/process", json={"payment_method": "credit-card"}, headers=member)

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"

    def test_oversell_is_rejected_and_nothing_changes(self, client, member, admin, product_id, shipping_address):
        _fill_cart(client, member, product_id, quantity=4)
        client.post(f"/api/products/{product_id}/stock", json={"delta": -8}, headers=admin)

        response = client.post(
            "/api/checkout/process",
            json={"shipping_address": shipping_address, "payment_method": "credit-card"},
            headers=member,
        )

        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"product_id": product_id, "error": "Insufficient inventory", "available": 2, "requested": 4}
        ]
        assert current_domain.repository_for(Product).get(product_id).stock_quantity == 2
        assert current_domain.repository_for(Order)._dao.query.all().total == 0
