"""Integration tests for the catalogue endpoints."""


def _register(client, admin, **overrides):
    payload = {"name": "Milk Jug", "sku": "jug-350", "base_price": 18.0, "stock_quantity": 12}
    payload.update(overrides)
    return client.post("/api/products", json=payload, headers=admin)


class TestCatalogueReads:
    def test_list_is_public(self, client, product_id):
        response = client.get("/api/products")
        assert response.status_code == 200
        assert [product["product_id"] for product in response.json()["data"]] == [product_id]

    def test_get_product(self, client, product_id):
        data = client.get(f"/api/products/{product_id}").json()["data"]
        assert data["sku"] == "CUP-001"
        assert data["stock_status"] == "in-stock"

    def test_unknown_product(self, client):
        response = client.get("/api/products/missing")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestCatalogueAdmin:
    def test_register(self, client, admin):
        response = _register(client, admin)
        assert response.status_code == 201
        assert response.json()["data"]["sku"] == "JUG-350"

    def test_register_requires_admin(self, client, member):
        assert _register(client, member).status_code == 403

    def test_register_requires_token(self, client):
        assert _register(client, {}).status_code == 401

    def test_duplicate_sku(self, client, admin):
        _register(client, admin)
        response = _register(client, admin, name="Other Jug")
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_price_status_and_stock(self, client, admin, product_id):
        price = client.put(f"/api/products/{product_id}/price", json={"sale_price": 20.0}, headers=admin)
        assert price.json()["data"]["current_price"] == 20.0

        stock = client.post(f"/api/products/{product_id}/stock", json={"delta": -7}, headers=admin)
        assert stock.json()["data"]["stock_quantity"] == 3
        assert stock.json()["data"]["stock_status"] == "low-stock"

        status = client.put(f"/api/products/{product_id}/status", json={"status": "discontinued"}, headers=admin)
        assert status.json()["data"]["status"] == "discontinued"
        assert client.get("/api/products").json()["data"] == []

    def test_inactive_product_cannot_be_added_to_cart(self, client, admin, member, product_id):
        client.put(f"/api/products/{product_id}/status", json={"status": "inactive"}, headers=admin)
        response = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 1}, headers=member)

        assert response.status_code == 400
        assert response.json()["code"] == "PRODUCT_UNAVAILABLE"


class TestMaintenanceApi:
    def test_expire_carts(self, client, guest, product_id):
        client.post("/api/cart/items", json={"product_id": product_id, "quantity": 1}, headers=guest)

        response = client.post("/api/maintenance/expire-carts", params={"as_of": "2099-01-01T00:00:00+00:00"})
        assert response.json()["data"] == {"expired": 1}
        assert client.get("/api/cart/summary", headers=guest).json()["data"]["item_count"] == 0
