"""Application tests for guest cart merge and the expiry sweep."""

from datetime import UTC, datetime, timedelta

from protean import current_domain
from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.cart.expiry import ExpireCarts
from storefront.cart.items import AddCartItem
from storefront.cart.management import GetOrCreateCart, MergeGuestCart
from storefront.catalogue.management import RegisterProduct

MEMBER = {"user_id": "user-001"}
GUEST = {"session_id": "sess-001"}


def _register_product(sku, **overrides):
    defaults = {"name": f"Product {sku}", "sku": sku, "base_price": 10.0, "stock_quantity": 50}
    defaults.update(overrides)
    return current_domain.process(RegisterProduct(**defaults), asynchronous=False)


def _add(owner, product_id, quantity=1):
    return current_domain.process(AddCartItem(**owner, product_id=product_id, quantity=quantity), asynchronous=False)


def _cart(cart_id):
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def _merge():
    return current_domain.process(MergeGuestCart(user_id="user-001", session_id="sess-001"), asynchronous=False)


class TestMergeGuestCart:
    def test_merge_sums_matching_lines(self):
        product_a = _register_product("A")
        product_b = _register_product("B")
        _add(MEMBER, product_a, 1)
        user_cart_id = _add(MEMBER, product_b, 3)
        guest_cart_id = _add(GUEST, product_a, 2)

        assert _merge() == user_cart_id

        quantities = {str(item.product_id): item.quantity for item in _cart(user_cart_id).items}
        assert quantities == {product_a: 3, product_b: 3}
        assert _cart(guest_cart_id).status == CartStatus.CONVERTED.value

    def test_merge_into_new_user_cart(self):
        product_a = _register_product("A")
        guest_cart_id = _add(GUEST, product_a, 2)

        user_cart = _cart(_merge())

        assert [(str(item.product_id), item.quantity) for item in user_cart.items] == [(product_a, 2)]
        assert user_cart.total == _cart(guest_cart_id).total
        assert _cart(guest_cart_id).status == CartStatus.CONVERTED.value

    def test_missing_guest_cart_is_noop(self):
        product_a = _register_product("A")
        user_cart_id = _add(MEMBER, product_a, 1)

        assert _merge() == user_cart_id
        assert _cart(user_cart_id).item_count == 1

    def test_empty_guest_cart_is_noop(self):
        guest_cart_id = current_domain.process(GetOrCreateCart(**GUEST), asynchronous=False)
        _merge()
        assert _cart(guest_cart_id).status == CartStatus.ACTIVE.value


class TestExpireCarts:
    def test_sweeps_only_expired_active_carts(self):
        product_a = _register_product("A")
        stale_id = _add(MEMBER, product_a, 1)
        fresh_id = _add(GUEST, product_a, 1)

        as_of = _cart(stale_id).expires_at + timedelta(seconds=1)
        fresh = _cart(fresh_id)
        fresh.expires_at = as_of + timedelta(days=1)
        current_domain.repository_for(ShoppingCart).add(fresh)

        expired = current_domain.process(ExpireCarts(as_of=as_of), asynchronous=False)

        assert expired == 1
        assert _cart(stale_id).status == CartStatus.EXPIRED.value
        assert _cart(fresh_id).status == CartStatus.ACTIVE.value

    def test_nothing_to_expire(self):
        _add(MEMBER, _register_product("A"), 1)
        assert current_domain.process(ExpireCarts(as_of=datetime.now(UTC)), asynchronous=False) == 0

    def test_expired_owner_gets_a_fresh_cart(self):
        product_a = _register_product("A")
        stale_id = _add(MEMBER, product_a, 1)
        current_domain.process(ExpireCarts(as_of=datetime.now(UTC) + timedelta(days=8)), asynchronous=False)

        new_cart_id = current_domain.process(GetOrCreateCart(**MEMBER), asynchronous=False)
        assert new_cart_id != stale_id
        assert _cart(new_cart_id).is_empty
