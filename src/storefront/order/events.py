"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created from a checked-out cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    cart_id = Identifier()
    user_id = Identifier()
    session_id = String()
    customer_email = String()
    items = Text(required=True)  # JSON: list of line snapshots
    total = Float(required=True)
    currency = String(max_length=3, required=True)
    status = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order's status was overwritten by staff, the customer or the system."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_status = String()
    tracking_number = String()
    note = Text()
    changed_by = String()
    customer_email = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = Text()
    cancelled_by = String()
    restocked = Boolean(default=False)
    cancelled_at = DateTime(required=True)
