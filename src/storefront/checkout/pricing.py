"""Cart and checkout pricing.

A pure function of the cart lines, shipping method and discount code. The
cart calls it after every mutation and checkout calls it again with the
method the customer picked, so totals are never stale when persisted.

Tax and shipping are flat-rate policies read from settings:

- tax = subtotal x TAX_RATE
- base shipping = 0 at or above FREE_SHIPPING_THRESHOLD, else FLAT_SHIPPING_FEE
- shipping = base shipping x method multiplier
- total = subtotal + tax + shipping - discount
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from storefront.config import Settings, get_settings
from storefront.shared.money import round_money


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    PICKUP = "pickup"
    DIGITAL = "digital"


SHIPPING_MULTIPLIERS = {
    ShippingMethod.STANDARD.value: 1,
    ShippingMethod.EXPRESS.value: 2,
    ShippingMethod.OVERNIGHT.value: 3,
    ShippingMethod.PICKUP.value: 0,
    ShippingMethod.DIGITAL.value: 0,
}


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free-shipping"


@dataclass(frozen=True)
class DiscountRule:
    kind: DiscountKind
    value: float = 0.0
    minimum_subtotal: float = 0.0


DISCOUNT_CODES = {
    "WELCOME10": DiscountRule(DiscountKind.PERCENTAGE, value=10, minimum_subtotal=50),
    "SAVE20": DiscountRule(DiscountKind.FIXED, value=20, minimum_subtotal=100),
    "FREESHIP": DiscountRule(DiscountKind.FREE_SHIPPING),
}


@dataclass(frozen=True)
class Totals:
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
        }


def normalize_code(code) -> str | None:
    if not code:
        return None
    return code.strip().upper() or None


def discount_for(code, subtotal, shipping) -> float:
    """Discount granted by ``code``.

    Unknown codes and codes whose minimum is not met give zero, the same as
    no code at all, so callers cannot probe which codes exist.
    """
    rule = DISCOUNT_CODES.get(normalize_code(code) or "")
    if rule is None or subtotal < rule.minimum_subtotal:
        return 0.0

    if rule.kind is DiscountKind.PERCENTAGE:
        return round_money(subtotal * rule.value / 100)
    if rule.kind is DiscountKind.FIXED:
        return round_money(min(rule.value, subtotal))
    return shipping


def shipping_for(subtotal, method, settings: Settings) -> float:
    if subtotal <= 0:
        return 0.0
    base = 0.0 if subtotal >= settings.free_shipping_threshold else settings.flat_shipping_fee
    multiplier = SHIPPING_MULTIPLIERS.get(method or ShippingMethod.STANDARD.value, 1)
    return round_money(base * multiplier)


def compute_totals(
    lines: Iterable[tuple[float, int]],
    shipping_method: str | None = None,
    discount_code: str | None = None,
    settings: Settings | None = None,
) -> Totals:
    """Price a set of ``(unit_price, quantity)`` lines."""
    settings = settings or get_settings()

    subtotal = round_money(sum(price * quantity for price, quantity in lines))
    tax = round_money(subtotal * settings.tax_rate)
    shipping = shipping_for(subtotal, shipping_method, settings)
    discount = discount_for(discount_code, subtotal, shipping)
    total = round_money(subtotal + tax + shipping - discount)

    return Totals(subtotal=subtotal, tax=tax, shipping=shipping, discount=discount, total=total)
