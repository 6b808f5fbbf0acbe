from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.domain import storefront
from storefront.shared.owner import Member, Owner
from storefront.shared.paging import fetch_all


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def find_active(self, owner: Owner):
        """The owner's active cart, or None.

        Only one active cart per owner is ever created; if older data holds
        several, the most recently touched one wins.
        """
        if isinstance(owner, Member):
            criteria = {"user_id": owner.user_id}
        else:
            criteria = {"session_id": owner.session_id}

        carts = self._dao.query.filter(status=CartStatus.ACTIVE.value, **criteria).all().items
        if not carts:
            return None
        return max(carts, key=lambda cart: cart.updated_at or cart.created_at)

    def get_or_create_active(self, owner: Owner):
        """Return ``(cart, created)``; a new cart is added to the repository."""
        cart = self.find_active(owner)
        if cart is not None:
            return cart, False

        cart = ShoppingCart.create(**owner.as_fields())
        self.add(cart)
        return cart, True

    def all_active(self):
        return fetch_all(self._dao.query.filter(status=CartStatus.ACTIVE.value))
