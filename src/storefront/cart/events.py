"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased by an add."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = Text()  # JSON object
    quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = Text()
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = Text()


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartsMerged:
    """A guest cart's lines were folded into a member's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    guest_cart_id = Identifier(required=True)
    merged_line_count = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class DiscountCodeApplied:
    """A discount code was stored on the cart.

    ``discount`` is zero when the code is unknown or its minimum is not met.
    """

    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True)
    discount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class ShippingMethodChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    shipping_method = String(required=True)
    shipping = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartConverted:
    """The cart was turned into an order, or merged into a member's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier()
    converted_at = DateTime(required=True)


@storefront.event(part_of="ShoppingCart")
class CartExpired:
    __version__ = 1

    cart_id = Identifier(required=True)
    expired_at = DateTime(required=True)
