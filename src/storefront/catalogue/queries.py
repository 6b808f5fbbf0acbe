"""Catalogue read views."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import NotFound


def product_view(product: Product) -> dict:
    return {
        "product_id": str(product.id),
        "name": product.name,
        "sku": product.sku,
        "description": product.description,
        "category": product.category,
        "base_price": product.base_price,
        "sale_price": product.sale_price,
        "current_price": product.current_price,
        "currency": product.currency,
        "stock_quantity": product.stock_quantity,
        "stock_status": product.stock_status,
        "track_inventory": product.track_inventory,
        "status": product.status,
    }


def load_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product not found") from None


def list_active_products() -> list[dict]:
    products = current_domain.repository_for(Product).active()
    return [product_view(product) for product in sorted(products, key=lambda p: p.name)]
