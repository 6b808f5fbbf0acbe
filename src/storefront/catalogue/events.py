"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    base_price = Float(required=True)
    stock_quantity = Integer(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The base or sale price of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@storefront.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Stock was taken for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)


@storefront.event(part_of="Product")
class StockRestored:
    """Stock was put back, either by an adjustment or a cancelled order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)


@storefront.event(part_of="Product")
class LowStockDetected:
    """Tracked stock fell to or below the product's low-stock threshold."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    remaining = Integer(required=True)
    threshold = Integer(required=True)
