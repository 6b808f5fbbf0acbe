"""Checkout adjustments: discount codes and shipping method.

Both store a choice on the cart and recompute totals through the same
pricing function the cart uses for every other mutation.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.initialization import load_checkout_cart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ApplyDiscountCode:
    user_id = Identifier()
    session_id = String(max_length=255)
    code = String(required=True, max_length=50)


@storefront.command(part_of="ShoppingCart")
class UpdateShippingMethod:
    user_id = Identifier()
    session_id = String(max_length=255)
    shipping_method = String(required=True, max_length=20)


@storefront.command_handler(part_of=ShoppingCart)
class CheckoutAdjustmentsHandler:
    @handle(ApplyDiscountCode)
    def apply_discount_code(self, command):
        cart = load_checkout_cart(command)
        cart.apply_discount_code(command.code)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.debug("Discount code applied", cart_id=str(cart.id), discount=cart.discount)
        return cart.discount

    @handle(UpdateShippingMethod)
    def update_shipping_method(self, command):
        cart = load_checkout_cart(command)
        cart.change_shipping_method(command.shipping_method)
        current_domain.repository_for(ShoppingCart).add(cart)
        return cart.shipping
