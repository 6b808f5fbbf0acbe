"""Runtime settings for pricing, cart expiry and authentication.

Values are read from the environment on every call so that tests and
operators can change them without restarting the domain.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    tax_rate: float
    free_shipping_threshold: float
    flat_shipping_fee: float
    cart_ttl_days: int
    currency: str
    jwt_secret: str
    jwt_algorithm: str
    restock_on_cancel: bool
    staff_alert_email: str


def get_settings() -> Settings:
    return Settings(
        tax_rate=float(os.getenv("TAX_RATE", "0.08")),
        free_shipping_threshold=float(os.getenv("FREE_SHIPPING_THRESHOLD", "100")),
        flat_shipping_fee=float(os.getenv("FLAT_SHIPPING_FEE", "10")),
        cart_ttl_days=int(os.getenv("CART_TTL_DAYS", "7")),
        currency=os.getenv("CURRENCY", "USD"),
        jwt_secret=os.getenv("JWT_SECRET", "storefront-dev-secret"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        restock_on_cancel=_env_bool("RESTOCK_ON_CANCEL", False),
        staff_alert_email=os.getenv("STAFF_ALERT_EMAIL", "inventory@storefront.local"),
    )
