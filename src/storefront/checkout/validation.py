"""Cart validation against the live catalogue.

Every line is checked and every problem is reported; a caller never sees
only the first failure. Each problem is a dict keyed by ``product_id`` with
an ``error`` message and, for stock problems, ``available`` and
``requested`` quantities.
"""

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product

PRODUCT_NOT_FOUND = "Product not found"
PRODUCT_UNAVAILABLE = "Product is not available"
INSUFFICIENT_INVENTORY = "Insufficient inventory"
PRICE_CHANGED = "Price has changed"


def validate_cart_lines(cart, check_prices: bool = False) -> list[dict]:
    products = current_domain.repository_for(Product).find_many(item.product_id for item in cart.items)
    return collect_line_errors(cart.items, products, check_prices=check_prices)


def collect_line_errors(items, products: dict, check_prices: bool = False) -> list[dict]:
    errors = []
    for item in items:
        product_id = str(item.product_id)
        product = products.get(product_id)

        if product is None:
            errors.append({"product_id": product_id, "error": PRODUCT_NOT_FOUND})
            continue

        if not product.is_purchasable:
            errors.append({"product_id": product_id, "error": PRODUCT_UNAVAILABLE})
            continue

        if not product.has_stock_for(item.quantity):
            errors.append(
                {
                    "product_id": product_id,
                    "error": INSUFFICIENT_INVENTORY,
                    "available": product.stock_quantity,
                    "requested": item.quantity,
                }
            )
            continue

        if check_prices and product.current_price != item.price:
            errors.append(
                {
                    "product_id": product_id,
                    "error": PRICE_CHANGED,
                    "old_price": item.price,
                    "new_price": product.current_price,
                }
            )

    return errors
