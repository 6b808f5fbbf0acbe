"""Order aggregate (CQRS): the record of a completed checkout.

Line items, addresses and pricing are captured from the cart at creation
and never change afterwards, regardless of later catalogue price changes.
Only lifecycle metadata moves: status, payment status, tracking and notes.

Status has no transition table: an authorized caller may write any
status. Cancellation is the exception and is refused once an order has
been delivered, cancelled or refunded.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.shared.money import round_money


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially-refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit-card"
    DEBIT_CARD = "debit-card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    LINE_PAY = "line-pay"
    WECHAT_PAY = "wechat-pay"


_NON_CANCELLABLE_STATUSES = {
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
    OrderStatus.REFUNDED.value,
}

DELIVERY_DAYS = {"express": 1, "standard": 3, "economy": 7}
DEFAULT_DELIVERY_DAYS = 5


def estimate_delivery(order_date, shipping_method):
    """Order date plus a fixed number of days per shipping method."""
    return order_date + timedelta(days=DELIVERY_DAYS.get(shipping_method, DEFAULT_DELIVERY_DAYS))


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """A shipping or billing address captured at checkout time."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    company = String(max_length=255)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=50)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Price breakdown locked at checkout.

    The total is always the breakdown: subtotal + tax + shipping - discount.
    """

    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_match_breakdown(self):
        expected = (self.subtotal or 0) + (self.tax or 0) + (self.shipping or 0) - (self.discount or 0)
        if abs((self.total or 0) - expected) > 0.01:
            raise ValidationError({"total": ["Order total does not match subtotal + tax + shipping - discount"]})

    @classmethod
    def from_breakdown(cls, subtotal, tax, shipping, discount, currency="USD"):
        return cls(
            subtotal=round_money(subtotal),
            tax=round_money(tax),
            shipping=round_money(shipping),
            discount=round_money(discount),
            total=round_money(subtotal + tax + shipping - discount),
            currency=currency,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A snapshot of one cart line as it was purchased."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    total = Float(required=True, min_value=0.0)
    variant = Text(default="{}")  # JSON object


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    placed_on = String(max_length=10)  # ISO date, used for daily numbering
    user_id = Identifier()
    session_id = String(max_length=255)
    customer_email = String(max_length=255)
    customer_name = String(max_length=255)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_method = String(max_length=20)
    shipping_address = ValueObject(Address)
    tracking_number = String(max_length=255)
    estimated_delivery = DateTime()
    delivered_at = DateTime()
    billing_address = ValueObject(Address)
    billing_same_as_shipping = Boolean(default=True)
    payment_method = String(choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    paid_at = DateTime()
    refunded_at = DateTime()
    notes = Text()
    internal_notes = Text()
    tags = Text(default="[]")  # JSON array
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=100)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_exactly_one_owner(self):
        if bool(self.user_id) == bool(self.session_id):
            raise ValidationError({"owner": ["An order must belong to either a user or a guest session"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        items_data,
        pricing,
        shipping_method,
        shipping_address,
        payment_method,
        billing_address=None,
        user_id=None,
        session_id=None,
        customer_email=None,
        customer_name=None,
        notes=None,
        cart_id=None,
        now=None,
    ):
        """Create a pending order from checkout data.

        Args:
            items_data: List of dicts with product_id, name, sku, price,
                        quantity, variant.
            pricing: An OrderPricing.
            shipping_address: Dict of Address fields.
            billing_address: Dict of Address fields; defaults to shipping.
        """
        now = now or datetime.now(UTC)
        shipping = Address(**shipping_address)
        billing = Address(**billing_address) if billing_address else shipping

        order = cls(
            order_number=order_number,
            placed_on=now.date().isoformat(),
            user_id=user_id,
            session_id=session_id,
            customer_email=customer_email,
            customer_name=customer_name or shipping.full_name,
            pricing=pricing,
            status=OrderStatus.PENDING.value,
            shipping_method=shipping_method,
            shipping_address=shipping,
            estimated_delivery=estimate_delivery(now, shipping_method),
            billing_address=billing,
            billing_same_as_shipping=not billing_address,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        snapshot = []
        for line in items_data:
            item = OrderItem(
                product_id=str(line["product_id"]),
                name=line["name"],
                sku=line.get("sku"),
                price=line["price"],
                quantity=line["quantity"],
                total=round_money(line["price"] * line["quantity"]),
                variant=line.get("variant") or "{}",
            )
            order.add_items(item)
            snapshot.append(
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "sku": item.sku,
                    "price": item.price,
                    "quantity": item.quantity,
                    "total": item.total,
                }
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                cart_id=cart_id,
                user_id=user_id,
                session_id=session_id,
                customer_email=customer_email,
                items=json.dumps(snapshot),
                total=pricing.total,
                currency=pricing.currency,
                status=order.status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _append_internal_note(self, note, now):
        entries = [self.internal_notes] if self.internal_notes else []
        entries.append(f"[{now.isoformat()}] {note}")
        self.internal_notes = "\n".join(entries)

    def change_status(self, new_status, payment_status=None, tracking_number=None, notes=None, changed_by=None):
        """Overwrite status and optional payment/tracking metadata."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid order status: {new_status}"]}) from None

        if payment_status is not None:
            try:
                PaymentStatus(payment_status)
            except ValueError:
                raise ValidationError({"payment_status": [f"Invalid payment status: {payment_status}"]}) from None

        now = datetime.now(UTC)
        previous_status = self.status
        self.status = target.value

        if payment_status is not None:
            self.payment_status = payment_status
            if payment_status == PaymentStatus.PAID.value:
                self.paid_at = now
            elif payment_status == PaymentStatus.REFUNDED.value:
                self.refunded_at = now

        if tracking_number:
            self.tracking_number = tracking_number
        if target is OrderStatus.DELIVERED:
            self.delivered_at = now
        if notes:
            self._append_internal_note(notes, now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous_status,
                new_status=target.value,
                payment_status=self.payment_status,
                tracking_number=self.tracking_number,
                note=notes,
                changed_by=changed_by,
                customer_email=self.customer_email,
                changed_at=now,
            )
        )

    def cancel(self, reason=None, cancelled_by=None, restocked=False):
        if self.status in _NON_CANCELLABLE_STATUSES:
            raise ValidationError({"status": [f"Cannot cancel an order that is {self.status}"]})

        reason = reason or "Order cancelled by customer"
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.change_status(OrderStatus.CANCELLED.value, notes=reason, changed_by=cancelled_by)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                cancelled_by=cancelled_by,
                restocked=restocked,
                cancelled_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return self.user_id is not None and str(self.user_id) == str(user_id)
