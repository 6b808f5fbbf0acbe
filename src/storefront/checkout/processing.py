"""Checkout processing: converts a validated cart into an order.

The whole conversion happens in one command handler, and therefore in one
unit of work:

1. The cart must have lines, and the request must name a shipping address
   and a payment method.
2. Every line is re-validated against the live catalogue; all problems are
   reported together.
3. Totals are recomputed with the chosen shipping method.
4. Stock is taken from each product in memory with a conditional
   decrement. If any line is short, the handler fails before anything has
   been written.
5. The order, the decremented products and the converted cart are
   persisted together and commit or roll back as one.

Concurrent checkouts against the same product are serialized by the
aggregate version check on commit: the later writer fails instead of
overselling.
"""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.checkout.initialization import load_checkout_cart
from storefront.checkout.validation import collect_line_errors
from storefront.domain import storefront
from storefront.errors import MissingField, ValidationFailed
from storefront.order.order import Order, OrderPricing, PaymentMethod

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ProcessCheckout:
    user_id = Identifier()
    session_id = String(max_length=255)
    shipping_address = Text()  # JSON: address dict
    billing_address = Text()  # JSON: address dict, omitted when same as shipping
    payment_method = String(max_length=20)
    shipping_method = String(max_length=20)
    notes = Text()
    customer_email = String(max_length=255)
    customer_name = String(max_length=255)


def _load_json(value):
    if not value:
        return None
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=ShoppingCart)
class ProcessCheckoutHandler:
    @handle(ProcessCheckout)
    def process_checkout(self, command):
        cart = load_checkout_cart(command)

        shipping_address = _load_json(command.shipping_address)
        if not shipping_address:
            raise MissingField("shipping_address", "Shipping address is required")
        if not command.payment_method:
            raise MissingField("payment_method", "Payment method is required")
        if command.payment_method not in {method.value for method in PaymentMethod}:
            raise ValidationFailed(
                "Unsupported payment method",
                errors=[{"field": "payment_method", "error": f"Unsupported payment method: {command.payment_method}"}],
            )

        product_repo = current_domain.repository_for(Product)
        products = product_repo.find_many(item.product_id for item in cart.items)

        errors = collect_line_errors(cart.items, products)
        if errors:
            logger.info("Checkout validation failed", cart_id=str(cart.id), error_count=len(errors))
            raise ValidationFailed("Cart validation failed", errors=errors)

        shipping_method = command.shipping_method or cart.shipping_method
        if shipping_method != cart.shipping_method:
            cart.change_shipping_method(shipping_method)
        else:
            cart.recalculate()

        # Take stock for every line before anything is persisted
        for item in cart.items:
            products[str(item.product_id)].decrement_stock(item.quantity)

        now = datetime.now(UTC)
        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=order_repo.next_order_number(now),
            items_data=[
                {
                    "product_id": str(item.product_id),
                    "name": item.name or products[str(item.product_id)].name,
                    "sku": item.sku,
                    "price": item.price,
                    "quantity": item.quantity,
                    "variant": item.variant,
                }
                for item in cart.items
            ],
            pricing=OrderPricing.from_breakdown(
                subtotal=cart.subtotal,
                tax=cart.tax,
                shipping=cart.shipping,
                discount=cart.discount,
                currency=cart.currency,
            ),
            shipping_method=cart.shipping_method,
            shipping_address=shipping_address,
            billing_address=_load_json(command.billing_address),
            payment_method=command.payment_method,
            user_id=cart.user_id,
            session_id=cart.session_id,
            customer_email=command.customer_email,
            customer_name=command.customer_name,
            notes=command.notes,
            cart_id=str(cart.id),
            now=now,
        )
        cart.convert(order_id=str(order.id))

        for product in products.values():
            product_repo.add(product)
        order_repo.add(order)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Checkout completed",
            order_id=str(order.id),
            order_number=order.order_number,
            cart_id=str(cart.id),
            total=order.pricing.total,
        )
        return str(order.id)
