"""Read-only cart views: full cart, summary and validation report."""

import json

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.validation import validate_cart_lines
from storefront.errors import EmptyCart
from storefront.shared.owner import Owner


def find_active_cart(owner: Owner):
    return current_domain.repository_for(ShoppingCart).find_active(owner)


def load_cart(cart_id) -> ShoppingCart:
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def cart_view(cart: ShoppingCart) -> dict:
    return {
        "cart_id": str(cart.id),
        "user_id": str(cart.user_id) if cart.user_id else None,
        "session_id": cart.session_id,
        "status": cart.status,
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "sku": item.sku,
                "quantity": item.quantity,
                "price": item.price,
                "total": item.line_total,
                "variant": json.loads(item.variant) if item.variant else {},
                "added_at": item.added_at,
            }
            for item in cart.items
        ],
        "item_count": cart.item_count,
        "subtotal": cart.subtotal,
        "tax": cart.tax,
        "shipping": cart.shipping,
        "discount": cart.discount,
        "total": cart.total,
        "currency": cart.currency,
        "discount_code": cart.discount_code,
        "shipping_method": cart.shipping_method,
        "expires_at": cart.expires_at,
        "updated_at": cart.updated_at,
    }


def cart_summary(owner: Owner) -> dict:
    cart = find_active_cart(owner)
    if cart is None:
        return {
            "item_count": 0,
            "line_count": 0,
            "subtotal": 0.0,
            "tax": 0.0,
            "shipping": 0.0,
            "discount": 0.0,
            "total": 0.0,
            "currency": None,
        }

    return {
        "item_count": cart.item_count,
        "line_count": len(cart.items),
        "subtotal": cart.subtotal,
        "tax": cart.tax,
        "shipping": cart.shipping,
        "discount": cart.discount,
        "total": cart.total,
        "currency": cart.currency,
    }


def validate_cart(owner: Owner) -> tuple[object, list[dict]]:
    """Return ``(cart, problems)``; problems include captured-price drift.

    The cart is not modified: captured prices stay as they were until the
    customer re-adds the line.
    """
    cart = find_active_cart(owner)
    if cart is None or cart.is_empty:
        raise EmptyCart()
    return cart, validate_cart_lines(cart, check_prices=True)
