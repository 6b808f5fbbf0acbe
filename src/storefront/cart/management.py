"""Cart management: commands and handler.

Handles lazy cart creation, clearing, and folding a guest cart into a
member's cart after login.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.shared.owner import Guest, Member, owner_from

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class GetOrCreateCart:
    """Return the owner's active cart, creating an empty one if none exists."""

    user_id = Identifier()
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Identifier()
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Merge the guest session's active cart into the member's active cart."""

    user_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(GetOrCreateCart)
    def get_or_create_cart(self, command):
        owner = owner_from(command.user_id, command.session_id)
        cart, created = current_domain.repository_for(ShoppingCart).get_or_create_active(owner)
        if created:
            logger.debug("Cart created", cart_id=str(cart.id), owner=repr(owner))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        owner = owner_from(command.user_id, command.session_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create_active(owner)
        cart.clear()
        repo.add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        user_cart, _ = repo.get_or_create_active(Member(user_id=str(command.user_id)))

        guest_cart = repo.find_active(Guest(session_id=command.session_id))
        if guest_cart is None or guest_cart.is_empty:
            return str(user_cart.id)

        user_cart.merge_guest_lines(guest_cart)
        guest_cart.convert()

        repo.add(user_cart)
        repo.add(guest_cart)

        logger.info(
            "Guest cart merged",
            cart_id=str(user_cart.id),
            guest_cart_id=str(guest_cart.id),
            line_count=len(guest_cart.items),
        )
        return str(user_cart.id)
