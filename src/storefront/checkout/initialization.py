"""Checkout initialization: command and handler.

Re-validates every cart line against the live catalogue and stores freshly
computed totals on the cart. All line problems are reported together.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.validation import validate_cart_lines
from storefront.domain import storefront
from storefront.errors import EmptyCart, ValidationFailed
from storefront.shared.owner import owner_from

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class InitializeCheckout:
    user_id = Identifier()
    session_id = String(max_length=255)


def load_checkout_cart(command) -> ShoppingCart:
    """The owner's active, non-empty cart, or ``EmptyCart``."""
    owner = owner_from(command.user_id, command.session_id)
    cart = current_domain.repository_for(ShoppingCart).find_active(owner)
    if cart is None or cart.is_empty:
        raise EmptyCart()
    return cart


@storefront.command_handler(part_of=ShoppingCart)
class InitializeCheckoutHandler:
    @handle(InitializeCheckout)
    def initialize_checkout(self, command):
        cart = load_checkout_cart(command)

        errors = validate_cart_lines(cart)
        if errors:
            logger.info("Checkout validation failed", cart_id=str(cart.id), error_count=len(errors))
            raise ValidationFailed("Cart validation failed", errors=errors)

        cart.recalculate()
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)
