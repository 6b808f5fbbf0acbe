"""Product aggregate: the shared, read-many source of price and stock.

Carts and checkout read products; stock is only taken at order creation,
through ``decrement_stock``, which refuses to drive tracked inventory below
zero.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.catalogue.events import (
    LowStockDetected,
    ProductPriceChanged,
    ProductRegistered,
    ProductStatusChanged,
    StockDecremented,
    StockRestored,
)
from storefront.domain import storefront
from storefront.errors import InsufficientInventory


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out-of-stock"
    DISCONTINUED = "discontinued"


class StockStatus(Enum):
    UNLIMITED = "unlimited"
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    description = Text()
    category = String(max_length=100)
    base_price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    currency = String(max_length=3, default="USD")
    stock_quantity = Integer(default=0)
    low_stock_threshold = Integer(default=5, min_value=0)
    track_inventory = Boolean(default=True)
    allow_backorder = Boolean(default=False)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def tracked_stock_cannot_be_negative(self):
        if self.track_inventory and not self.allow_backorder and (self.stock_quantity or 0) < 0:
            raise ValidationError({"stock_quantity": ["Tracked stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(
        cls,
        name,
        sku,
        base_price,
        stock_quantity=0,
        sale_price=None,
        description=None,
        category=None,
        currency="USD",
        low_stock_threshold=5,
        track_inventory=True,
        allow_backorder=False,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku.strip().upper(),
            description=description,
            category=category,
            base_price=base_price,
            sale_price=sale_price,
            currency=currency,
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
            track_inventory=track_inventory,
            allow_backorder=allow_backorder,
            status=ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                sku=product.sku,
                name=name,
                base_price=base_price,
                stock_quantity=stock_quantity,
                registered_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def current_price(self) -> float:
        """Sale price when one is set, otherwise the base price."""
        if self.sale_price:
            return self.sale_price
        return self.base_price

    @property
    def is_purchasable(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def stock_status(self) -> str:
        if not self.track_inventory:
            return StockStatus.UNLIMITED.value
        if self.stock_quantity <= 0:
            return StockStatus.OUT_OF_STOCK.value
        if self.stock_quantity <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK.value
        return StockStatus.IN_STOCK.value

    def has_stock_for(self, quantity) -> bool:
        """Untracked and backorderable products always have stock; others need enough on hand."""
        if not self.track_inventory or self.allow_backorder:
            return True
        return self.stock_quantity >= quantity

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    def change_price(self, base_price=None, sale_price=None):
        previous_price = self.current_price
        if base_price is not None:
            self.base_price = base_price
        if sale_price is not None:
            # A zero sale price clears the sale
            self.sale_price = sale_price or None
        self.updated_at = datetime.now(UTC)

        if self.current_price != previous_price:
            self.raise_(
                ProductPriceChanged(
                    product_id=str(self.id),
                    previous_price=previous_price,
                    new_price=self.current_price,
                )
            )

    def change_status(self, new_status):
        try:
            target = ProductStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown product status: {new_status}"]}) from None

        previous_status = self.status
        if previous_status == target.value:
            return

        self.status = target.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=previous_status,
                new_status=target.value,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity):
        """Take ``quantity`` units, or fail without touching stock.

        This is the conditional decrement used at order creation: the check
        and the subtraction happen on the same loaded aggregate, so a product
        can never be oversold into negative stock. Backorderable products
        may go below zero; the deficit is owed to the buyers.
        """
        if not self.track_inventory:
            return

        if not self.has_stock_for(quantity):
            raise InsufficientInventory(
                product_id=str(self.id),
                available=self.stock_quantity,
                requested=quantity,
                message=f"Insufficient inventory for {self.name}",
            )

        self.stock_quantity -= quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock_quantity,
            )
        )

        if self.stock_quantity <= 0 and not self.allow_backorder and self.status == ProductStatus.ACTIVE.value:
            self.change_status(ProductStatus.OUT_OF_STOCK.value)

        if self.stock_quantity <= self.low_stock_threshold:
            self.raise_(
                LowStockDetected(
                    product_id=str(self.id),
                    sku=self.sku,
                    remaining=self.stock_quantity,
                    threshold=self.low_stock_threshold,
                )
            )

    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})
        if not self.track_inventory:
            return

        self.stock_quantity += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock_quantity,
            )
        )

        if self.status == ProductStatus.OUT_OF_STOCK.value:
            self.change_status(ProductStatus.ACTIVE.value)
