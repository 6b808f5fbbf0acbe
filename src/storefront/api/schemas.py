"""Pydantic request schemas for the storefront API.

These are the external contracts; routes translate them into Protean
commands. Fields the domain checks itself (shipping address, payment
method) are optional here so the domain can report them precisely.
"""

import json

from pydantic import BaseModel, Field


def variant_json(variant: dict | None) -> str | None:
    return json.dumps(variant, sort_keys=True) if variant else None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1, le=99)
    variant: dict | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "4f7c0d3e-prod", "quantity": 2, "variant": {"size": "M"}}]
        }
    }


class UpdateItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(le=99)
    variant: dict | None = None


class RemoveItemRequest(BaseModel):
    product_id: str
    variant: dict | None = None


class MergeCartRequest(BaseModel):
    session_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str
    last_name: str
    company: str | None = None
    street: str
    city: str
    state: str | None = None
    zip_code: str
    country: str
    phone: str | None = None


class ProcessCheckoutRequest(BaseModel):
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    payment_method: str | None = None
    shipping_method: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    customer_email: str | None = None
    customer_name: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "street": "12 Analytical Way",
                        "city": "London",
                        "zip_code": "N1 9GU",
                        "country": "UK",
                    },
                    "payment_method": "credit-card",
                    "shipping_method": "standard",
                }
            ]
        }
    }


class ShippingMethodRequest(BaseModel):
    shipping_method: str


class DiscountCodeRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str
    payment_status: str | None = None
    tracking_number: str | None = None
    notes: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str
    sku: str
    base_price: float = Field(ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    currency: str = "USD"
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)
    track_inventory: bool = True
    allow_backorder: bool = False
    description: str | None = None
    category: str | None = None


class UpdatePriceRequest(BaseModel):
    base_price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)


class ProductStatusRequest(BaseModel):
    status: str


class AdjustStockRequest(BaseModel):
    delta: int
