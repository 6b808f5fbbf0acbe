import jwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api import cart_router, checkout_router, maintenance_router, order_router, product_router
from storefront.api.errors import register_exception_handlers
from storefront.catalogue.management import RegisterProduct
from storefront.config import get_settings

SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Way",
    "city": "London",
    "zip_code": "N1 9GU",
    "country": "UK",
}


def bearer(user_id, role="customer", email=None, **claims):
    settings = get_settings()
    payload = {"userId": user_id, "email": email or f"{user_id}@example.com", "role": role, **claims}
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (cart_router, checkout_router, order_router, product_router, maintenance_router):
        app.include_router(router)
    register_exception_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def member():
    return bearer("user-001", firstName="Ada", lastName="Lovelace", email="ada@example.com")


@pytest.fixture()
def admin():
    return bearer("admin-001", role="admin", email="ops@example.com")


@pytest.fixture()
def guest():
    return {"x-session-id": "sess-abc"}


@pytest.fixture()
def product_id():
    return current_domain.process(
        RegisterProduct(name="Espresso Cup", sku="CUP-001", base_price=25.0, stock_quantity=10),
        asynchronous=False,
    )


@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def place_order(client, shipping_address, product_id):
    """Fill the caller's cart with ``quantity`` cups and check out."""

    def _place(headers, quantity=1, **extra):
        client.post("/api/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
        response = client.post(
            "/api/checkout/process",
            json={"shipping_address": shipping_address, "payment_method": "credit-card", **extra},
            headers=headers,
        )
        return response.json()["data"]

    return _place


@pytest.fixture()
def stranger():
    return bearer("user-999", email="eve@example.com")
