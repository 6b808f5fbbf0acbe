"""Catalogue management: commands and handler.

Product authoring is minimal here: enough to register products, adjust
their prices, status and stock so that carts and checkout have something
real to read.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Conflict

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    base_price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    currency = String(max_length=3, default="USD")
    stock_quantity = Integer(default=0, min_value=0)
    low_stock_threshold = Integer(default=5, min_value=0)
    track_inventory = Boolean(default=True)
    allow_backorder = Boolean(default=False)
    description = Text()
    category = String(max_length=100)


@storefront.command(part_of="Product")
class UpdateProductPrice:
    product_id = Identifier(required=True)
    base_price = Float(min_value=0.0)
    sale_price = Float(min_value=0.0)


@storefront.command(part_of="Product")
class ChangeProductStatus:
    product_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@storefront.command(part_of="Product")
class AdjustStock:
    """Add (positive) or take (negative) stock outside of checkout."""

    product_id = Identifier(required=True)
    delta = Integer(required=True)


@storefront.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.find_by_sku(command.sku) is not None:
            raise Conflict(f"Product with SKU {command.sku.strip().upper()} already exists")

        product = Product.register(
            name=command.name,
            sku=command.sku,
            base_price=command.base_price,
            sale_price=command.sale_price,
            currency=command.currency or "USD",
            stock_quantity=command.stock_quantity or 0,
            low_stock_threshold=command.low_stock_threshold if command.low_stock_threshold is not None else 5,
            track_inventory=command.track_inventory if command.track_inventory is not None else True,
            allow_backorder=bool(command.allow_backorder),
            description=command.description,
            category=command.category,
        )
        repo.add(product)
        logger.info("Product registered", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProductPrice)
    def update_product_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(base_price=command.base_price, sale_price=command.sale_price)
        repo.add(product)

    @handle(ChangeProductStatus)
    def change_product_status(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_status(command.status)
        repo.add(product)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if command.delta > 0:
            product.restock(command.delta)
        elif command.delta < 0:
            product.decrement_stock(-command.delta)
        repo.add(product)
        return product.stock_quantity
