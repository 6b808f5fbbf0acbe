"""Checkout session view: the pending totals and the choices still open."""

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.pricing import SHIPPING_MULTIPLIERS
from storefront.errors import NotFound
from storefront.order.order import PaymentMethod
from storefront.shared.owner import Owner


def checkout_session(owner: Owner) -> tuple[ShoppingCart, dict]:
    cart = current_domain.repository_for(ShoppingCart).find_active(owner)
    if cart is None or cart.is_empty:
        raise NotFound("No active checkout session found")

    return cart, {
        "subtotal": cart.subtotal,
        "tax": cart.tax,
        "shipping": cart.shipping,
        "discount": cart.discount,
        "total": cart.total,
        "currency": cart.currency,
        "shipping_method": cart.shipping_method,
        "discount_code": cart.discount_code,
        "shipping_methods": list(SHIPPING_MULTIPLIERS),
        "payment_methods": [method.value for method in PaymentMethod],
    }
