"""Shared BDD fixtures and step definitions for the storefront."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddCartItem
from storefront.catalogue.management import RegisterProduct
from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.shared.owner import Member

SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Way",
    "city": "London",
    "zip_code": "N1 9GU",
    "country": "UK",
}


@pytest.fixture()
def products():
    """SKU -> product id for products registered in Given steps."""
    return {}


@pytest.fixture()
def orders():
    """User id -> order id for orders placed in When steps."""
    return {}


@pytest.fixture()
def error():
    """Container for the failure of the last checkout attempt."""
    return {"exc": None}


def orders_for(user_id):
    return current_domain.repository_for(Order)._dao.query.filter(user_id=user_id).all().items


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{sku}" priced at {price:f} with {stock:d} in stock'))
def registered_product(products, sku, price, stock):
    products[sku] = current_domain.process(
        RegisterProduct(name=f"Product {sku}", sku=sku, base_price=price, stock_quantity=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('member "{user_id}" has {quantity:d} of "{sku}" in their cart'))
def member_cart_line(products, user_id, quantity, sku):
    current_domain.process(
        AddCartItem(user_id=user_id, product_id=products[sku], quantity=quantity),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{sku}" has {stock:d} in stock'))
def product_stock(products, sku, stock):
    assert current_domain.repository_for(Product).get(products[sku]).stock_quantity == stock


@then(parsers.cfparse('"{sku}" is out of stock'))
def product_out_of_stock(products, sku):
    assert current_domain.repository_for(Product).get(products[sku]).status == "out-of-stock"


@then(parsers.cfparse('an order is placed for "{user_id}"'))
def order_placed(orders, user_id):
    placed = orders_for(user_id)
    assert len(placed) == 1
    assert str(placed[0].id) == orders[user_id]


@then(parsers.cfparse('no order is placed for "{user_id}"'))
def no_order_placed(orders, user_id):
    assert user_id not in orders
    assert orders_for(user_id) == []


@then(parsers.cfparse('the cart of "{user_id}" is converted'))
def cart_converted(user_id):
    assert current_domain.repository_for(ShoppingCart).find_active(Member(user_id)) is None
    carts = current_domain.repository_for(ShoppingCart)._dao.query.filter(user_id=user_id).all().items
    assert [cart.status for cart in carts] == ["converted"]


@then(parsers.cfparse('the cart of "{user_id}" is still active'))
def cart_still_active(user_id):
    cart = current_domain.repository_for(ShoppingCart).find_active(Member(user_id))
    assert cart is not None
    assert not cart.is_empty


@pytest.fixture()
def shipping_address():
    return json.dumps(SHIPPING_ADDRESS)
