"""Application tests for checkout: validation, pricing and order creation."""

import json
from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError
from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.cart.items import AddCartItem
from storefront.catalogue.management import AdjustStock, ChangeProductStatus, RegisterProduct, UpdateProductPrice
from storefront.catalogue.product import Product
from storefront.checkout.adjustments import ApplyDiscountCode
from storefront.checkout.initialization import InitializeCheckout
from storefront.checkout.processing import ProcessCheckout
from storefront.errors import EmptyCart, InsufficientInventory, MissingField, ValidationFailed
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.shared.owner import Guest, Member

MEMBER = {"user_id": "user-001"}
GUEST = {"session_id": "sess-001"}

SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Way",
    "city": "London",
    "zip_code": "N1 9GU",
    "country": "UK",
}


def _register_product(**overrides):
    defaults = {"name": "P1", "sku": "P1", "base_price": 50.0, "stock_quantity": 3}
    defaults.update(overrides)
    return current_domain.process(RegisterProduct(**defaults), asynchronous=False)


def _add(owner, product_id, quantity=1, variant=None):
    return current_domain.process(
        AddCartItem(**owner, product_id=product_id, quantity=quantity, variant=json.dumps(variant) if variant else None),
        asynchronous=False,
    )


def _checkout(owner, **overrides):
    payload = {
        "shipping_address": json.dumps(SHIPPING_ADDRESS),
        "payment_method": "credit-card",
        "customer_email": "ada@example.com",
    }
    payload.update(overrides)
    return current_domain.process(ProcessCheckout(**owner, **payload), asynchronous=False)


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestLiteralScenario:
    def test_checkout_takes_stock_and_locks_totals(self):
        product_id = _register_product()
        cart_id = _add(MEMBER, product_id, 2)

        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert (cart.subtotal, cart.tax, cart.shipping, cart.total) == (100.0, 8.0, 0.0, 108.0)

        order_id = _checkout(MEMBER)
        order = current_domain.repository_for(Order).get(order_id)

        assert order.pricing.total == cart.total
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert _product(product_id).stock_quantity == 1
        assert current_domain.repository_for(ShoppingCart).get(cart_id).status == CartStatus.CONVERTED.value

    def test_second_checkout_against_stale_baseline_is_rejected(self):
        product_id = _register_product()
        # Both carts are filled while three units are still on hand
        guest_cart_id = _add(GUEST, product_id, 2)
        _add(MEMBER, product_id, 2)

        _checkout(MEMBER)

        with pytest.raises(ValidationFailed) as exc:
            _checkout(GUEST)

        assert exc.value.errors == [
            {"product_id": product_id, "error": "Insufficient inventory", "available": 1, "requested": 2}
        ]
        assert _product(product_id).stock_quantity == 1
        assert current_domain.repository_for(ShoppingCart).get(guest_cart_id).status == CartStatus.ACTIVE.value
        assert len(_orders()) == 1


class TestAtomicity:
    def test_failed_decrement_leaves_nothing_behind(self):
        product_id = _register_product()
        cart_id = _add(MEMBER, product_id, 2, {"size": "M"})
        _add(MEMBER, product_id, 2, {"size": "L"})

        # Each line fits on its own; together they need four of three units
        with pytest.raises(InsufficientInventory) as exc:
            _checkout(MEMBER)

        assert exc.value.available == 1
        assert exc.value.requested == 2
        assert _product(product_id).stock_quantity == 3
        assert current_domain.repository_for(ShoppingCart).get(cart_id).status == CartStatus.ACTIVE.value
        assert _orders() == []

    def test_stock_never_goes_negative(self):
        product_id = _register_product(stock_quantity=2)
        _add(MEMBER, product_id, 2)
        _add(GUEST, product_id, 2)

        _checkout(MEMBER)
        with pytest.raises(ValidationFailed):
            _checkout(GUEST)

        assert _product(product_id).stock_quantity == 0

    def test_write_from_stale_product_copy_is_rejected(self):
        product_id = _register_product()
        _add(MEMBER, product_id, 2)
        repo = current_domain.repository_for(Product)
        stale = repo.get(product_id)

        _checkout(MEMBER)

        # The stale copy still believes three units are on hand
        stale.decrement_stock(2)
        with pytest.raises(ExpectedVersionError):
            repo.add(stale)

        assert _product(product_id).stock_quantity == 1
        assert len(_orders()) == 1


class TestCheckoutPreconditions:
    def test_initialize_empty_cart(self):
        with pytest.raises(EmptyCart):
            current_domain.process(InitializeCheckout(**MEMBER), asynchronous=False)

    def test_process_empty_cart(self):
        with pytest.raises(EmptyCart):
            _checkout(MEMBER)

    def test_missing_shipping_address(self):
        _add(MEMBER, _register_product(), 1)
        with pytest.raises(MissingField) as exc:
            _checkout(MEMBER, shipping_address=None)
        assert exc.value.field == "shipping_address"

    def test_missing_payment_method(self):
        _add(MEMBER, _register_product(), 1)
        with pytest.raises(MissingField) as exc:
            _checkout(MEMBER, payment_method=None)
        assert exc.value.field == "payment_method"

    def test_unsupported_payment_method(self):
        _add(MEMBER, _register_product(), 1)
        with pytest.raises(ValidationFailed):
            _checkout(MEMBER, payment_method="barter")

    def test_initialize_reports_every_problem(self):
        short_id = _register_product(name="Short", sku="SHORT", stock_quantity=3)
        retired_id = _register_product(name="Retired", sku="RETIRED", stock_quantity=3)
        _add(MEMBER, short_id, 2)
        _add(MEMBER, retired_id, 1)

        current_domain.process(AdjustStock(product_id=short_id, delta=-2), asynchronous=False)
        current_domain.process(ChangeProductStatus(product_id=retired_id, status="discontinued"), asynchronous=False)

        with pytest.raises(ValidationFailed) as exc:
            current_domain.process(InitializeCheckout(**MEMBER), asynchronous=False)

        errors = {error["product_id"]: error for error in exc.value.errors}
        assert errors[short_id] == {
            "product_id": short_id,
            "error": "Insufficient inventory",
            "available": 1,
            "requested": 2,
        }
        assert errors[retired_id]["error"] == "Product is not available"

    def test_initialize_valid_cart_returns_cart(self):
        cart_id = _add(MEMBER, _register_product(), 1)
        assert current_domain.process(InitializeCheckout(**MEMBER), asynchronous=False) == cart_id


class TestOrderSnapshot:
    def test_order_lines_ignore_later_price_changes(self):
        product_id = _register_product()
        _add(MEMBER, product_id, 2)
        order_id = _checkout(MEMBER)

        current_domain.process(UpdateProductPrice(product_id=product_id, base_price=99.0), asynchronous=False)

        item = current_domain.repository_for(Order).get(order_id).items[0]
        assert (item.name, item.price, item.quantity, item.total) == ("P1", 50.0, 2, 100.0)

    def test_order_numbers_are_sequential_per_day(self):
        product_id = _register_product(stock_quantity=10)
        _add(MEMBER, product_id, 1)
        first = current_domain.repository_for(Order).get(_checkout(MEMBER))
        _add(MEMBER, product_id, 1)
        second = current_domain.repository_for(Order).get(_checkout(MEMBER))

        today = datetime.now(UTC).strftime("%y%m%d")
        assert first.order_number == f"SN{today}0001"
        assert second.order_number == f"SN{today}0002"

    def test_shipping_method_and_discount_flow_into_order(self):
        product_id = _register_product(base_price=30.0, stock_quantity=10)
        _add(MEMBER, product_id, 2)
        current_domain.process(ApplyDiscountCode(**MEMBER, code="welcome10"), asynchronous=False)

        order = current_domain.repository_for(Order).get(_checkout(MEMBER, shipping_method="express"))

        assert order.shipping_method == "express"
        assert order.pricing.subtotal == 60.0
        assert order.pricing.shipping == 20.0
        assert order.pricing.discount == 6.0
        assert order.pricing.total == 78.8

    def test_guest_checkout_keeps_guest_owner(self):
        _add(GUEST, _register_product(), 1)
        order = current_domain.repository_for(Order).get(_checkout(GUEST))
        assert order.session_id == "sess-001"
        assert order.user_id is None
        assert order.customer_name == "Ada Lovelace"

    def test_new_cart_after_checkout(self):
        product_id = _register_product(stock_quantity=10)
        old_cart_id = _add(MEMBER, product_id, 1)
        _checkout(MEMBER)

        assert current_domain.repository_for(ShoppingCart).find_active(Member(user_id="user-001")) is None
        assert _add(MEMBER, product_id, 1) != old_cart_id
        assert current_domain.repository_for(ShoppingCart).find_active(Guest(session_id="sess-001")) is None
