"""Shopping Cart aggregate (CQRS): the mutable pre-purchase collection of lines.

A cart belongs to exactly one owner, a member (``user_id``) or a guest
session (``session_id``). It captures each product's price at the moment
the line is added; drift against the catalogue is only reconciled at
validation and checkout time. Totals are recomputed from the lines after
every mutation.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.cart.events import (
    CartCleared,
    CartConverted,
    CartExpired,
    CartItemAdded,
    CartItemRemoved,
    CartItemUpdated,
    CartsMerged,
    DiscountCodeApplied,
    ShippingMethodChanged,
)
from storefront.checkout.pricing import SHIPPING_MULTIPLIERS, ShippingMethod, compute_totals, normalize_code
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.shared.money import round_money

MAX_LINE_QUANTITY = 99


class CartStatus(Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    CONVERTED = "converted"
    EXPIRED = "expired"


def variant_key(variant) -> str:
    """Canonical JSON for a variant descriptor; a missing variant is ``{}``."""
    if isinstance(variant, str):
        variant = json.loads(variant) if variant else {}
    return json.dumps(variant or {}, sort_keys=True, separators=(",", ":"))


def _utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    sku = String(max_length=50)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    price = Float(required=True, min_value=0.0)  # Captured when the line was added
    variant = Text(default="{}")  # Canonical JSON
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round_money(self.price * self.quantity)

    def matches(self, product_id, variant) -> bool:
        return str(self.product_id) == str(product_id) and self.variant == variant_key(variant)


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier()  # Set for member carts
    session_id = String(max_length=255)  # Set for guest carts
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    currency = String(max_length=3, default="USD")
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    discount_code = String(max_length=50)
    shipping_method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_exactly_one_owner(self):
        if bool(self.user_id) == bool(self.session_id):
            raise ValidationError({"owner": ["A cart must belong to either a user or a guest session"]})

    @invariant.post
    def total_must_match_breakdown(self):
        expected = (self.subtotal or 0) + (self.tax or 0) + (self.shipping or 0) - (self.discount or 0)
        if abs((self.total or 0) - expected) > 0.01:
            raise ValidationError({"total": ["Cart total does not match subtotal + tax + shipping - discount"]})

    @invariant.post
    def cart_must_have_items_to_convert(self):
        if self.status == CartStatus.CONVERTED.value and not self.items:
            raise ValidationError({"cart": ["Cannot convert an empty cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None, now=None):
        settings = get_settings()
        now = now or datetime.now(UTC)
        return cls(
            user_id=user_id,
            session_id=session_id,
            status=CartStatus.ACTIVE.value,
            currency=settings.currency,
            expires_at=now + timedelta(days=settings.cart_ttl_days),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find_item(self, product_id, variant=None):
        return next((i for i in self.items if i.matches(product_id, variant)), None)

    def quantity_of(self, product_id, variant=None) -> int:
        item = self.find_item(product_id, variant)
        return item.quantity if item else 0

    def is_expired(self, as_of=None) -> bool:
        as_of = _utc(as_of) or datetime.now(UTC)
        return self.expires_at is not None and _utc(self.expires_at) <= as_of

    # -------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------
    def _assert_active(self, action):
        if self.status != CartStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Cannot {action} a cart that is {self.status}"]})

    def _recalculate(self):
        totals = compute_totals(
            ((item.price, item.quantity) for item in self.items),
            shipping_method=self.shipping_method,
            discount_code=self.discount_code,
        )
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.shipping = totals.shipping
        self.discount = totals.discount
        self.total = totals.total
        self.updated_at = datetime.now(UTC)

    def recalculate(self):
        """Recompute totals against the current lines, method and discount code."""
        with atomic_change(self):
            self._recalculate()

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, price, name=None, sku=None, variant=None):
        """Add ``quantity`` of a product, summing into an existing line for the same variant.

        A new line captures ``price``; an existing line keeps the price it was
        first added at.
        """
        self._assert_active("add items to")
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find_item(product_id, variant)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > MAX_LINE_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity cannot exceed {MAX_LINE_QUANTITY}"]})

        with atomic_change(self):
            if existing:
                existing.quantity = new_quantity
                captured_price = existing.price
            else:
                self.add_items(
                    CartItem(
                        product_id=str(product_id),
                        name=name,
                        sku=sku,
                        quantity=quantity,
                        price=price,
                        variant=variant_key(variant),
                        added_at=datetime.now(UTC),
                    )
                )
                captured_price = price
            self._recalculate()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant=variant_key(variant),
                quantity=quantity,
                price=captured_price,
            )
        )

    def update_item_quantity(self, product_id, quantity, variant=None):
        """Set a line's quantity; zero or less removes the line.

        Updating a line that is not in the cart leaves the cart unchanged.
        """
        self._assert_active("update items in")
        if quantity is None or quantity <= 0:
            self.remove_item(product_id, variant)
            return

        if quantity > MAX_LINE_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity cannot exceed {MAX_LINE_QUANTITY}"]})

        item = self.find_item(product_id, variant)
        if item is None:
            return

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            self._recalculate()

        self.raise_(
            CartItemUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant=variant_key(variant),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, variant=None):
        """Remove a line if present. Removing an absent line is a no-op."""
        self._assert_active("remove items from")
        item = self.find_item(product_id, variant)
        if item is None:
            return

        with atomic_change(self):
            self.remove_items(item)
            self._recalculate()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant=variant_key(variant),
            )
        )

    def clear(self):
        self._assert_active("clear")
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.discount_code = None
            self._recalculate()

        self.raise_(CartCleared(cart_id=str(self.id)))

    def merge_guest_lines(self, guest_cart):
        """Fold a guest cart's lines into this cart.

        Matching product+variant lines are summed (capped at the line
        maximum); the rest are appended with the guest's captured price.
        """
        self._assert_active("merge into")
        now = datetime.now(UTC)

        with atomic_change(self):
            for line in guest_cart.items:
                existing = self.find_item(line.product_id, line.variant)
                if existing:
                    existing.quantity = min(existing.quantity + line.quantity, MAX_LINE_QUANTITY)
                else:
                    self.add_items(
                        CartItem(
                            product_id=str(line.product_id),
                            name=line.name,
                            sku=line.sku,
                            quantity=line.quantity,
                            price=line.price,
                            variant=line.variant,
                            added_at=now,
                        )
                    )
            self._recalculate()

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                guest_cart_id=str(guest_cart.id),
                merged_line_count=len(guest_cart.items),
            )
        )

    # -------------------------------------------------------------------
    # Checkout support
    # -------------------------------------------------------------------
    def apply_discount_code(self, code):
        self._assert_active("apply a discount to")
        normalized = normalize_code(code)
        if normalized is None:
            raise ValidationError({"code": ["Discount code is required"]})

        with atomic_change(self):
            self.discount_code = normalized
            self._recalculate()

        self.raise_(DiscountCodeApplied(cart_id=str(self.id), code=normalized, discount=self.discount))

    def change_shipping_method(self, method):
        self._assert_active("change shipping on")
        if method not in SHIPPING_MULTIPLIERS:
            raise ValidationError({"shipping_method": [f"Unknown shipping method: {method}"]})

        with atomic_change(self):
            self.shipping_method = method
            self._recalculate()

        self.raise_(
            ShippingMethodChanged(
                cart_id=str(self.id),
                shipping_method=method,
                shipping=self.shipping,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def convert(self, order_id=None):
        self._assert_active("convert")
        now = datetime.now(UTC)
        self.status = CartStatus.CONVERTED.value
        self.updated_at = now
        self.raise_(CartConverted(cart_id=str(self.id), order_id=order_id, converted_at=now))

    def expire(self, as_of=None):
        self._assert_active("expire")
        now = _utc(as_of) or datetime.now(UTC)
        self.status = CartStatus.EXPIRED.value
        self.updated_at = now
        self.raise_(CartExpired(cart_id=str(self.id), expired_at=now))
