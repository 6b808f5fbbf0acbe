"""FastAPI routes for the storefront: cart, checkout, orders and catalogue.

Writes go through Protean commands processed synchronously; reads use the
query helpers next to each aggregate. Every response is wrapped in the
``{success, message, data, errors}`` envelope.
"""

import json
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.identity import Identity, require_admin, require_member, require_owner
from storefront.api.responses import envelope
from storefront.api.schemas import (
    AddItemRequest,
    AdjustStockRequest,
    CancelOrderRequest,
    DiscountCodeRequest,
    MergeCartRequest,
    ProcessCheckoutRequest,
    ProductStatusRequest,
    RegisterProductRequest,
    RemoveItemRequest,
    ShippingMethodRequest,
    UpdateItemRequest,
    UpdateOrderStatusRequest,
    UpdatePriceRequest,
    variant_json,
)
from storefront.cart.expiry import ExpireCarts
from storefront.cart.items import AddCartItem, RemoveCartItem, UpdateCartItem
from storefront.cart.management import ClearCart, GetOrCreateCart, MergeGuestCart
from storefront.cart.queries import cart_summary, cart_view, load_cart, validate_cart
from storefront.catalogue.management import AdjustStock, ChangeProductStatus, RegisterProduct, UpdateProductPrice
from storefront.catalogue.queries import list_active_products, load_product, product_view
from storefront.checkout.adjustments import ApplyDiscountCode, UpdateShippingMethod
from storefront.checkout.initialization import InitializeCheckout
from storefront.checkout.processing import ProcessCheckout
from storefront.checkout.session import checkout_session
from storefront.errors import ValidationFailed
from storefront.order.cancellation import CancelOrder
from storefront.order.queries import (
    load_order,
    load_order_for,
    order_confirmation,
    order_detail,
    order_tracking,
    send_order_confirmation_email,
    track_order_by_number,
    user_order_history,
)
from storefront.order.status import UpdateOrderStatus


def _process(command):
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(identity: Identity = Depends(require_owner)) -> dict:
    cart_id = _process(GetOrCreateCart(**identity.owner_fields()))
    return envelope(data=cart_view(load_cart(cart_id)))


@cart_router.get("/summary")
async def get_cart_summary(identity: Identity = Depends(require_owner)) -> dict:
    return envelope(data=cart_summary(identity.owner))


@cart_router.get("/validate")
async def validate(identity: Identity = Depends(require_owner)) -> dict:
    cart, problems = validate_cart(identity.owner)
    if problems:
        raise ValidationFailed("Cart validation failed", errors=problems)
    return envelope(message="Cart is valid", data={"valid": True, "cart": cart_view(cart)})


@cart_router.post("/items")
async def add_item(body: AddItemRequest, identity: Identity = Depends(require_owner)) -> dict:
    cart_id = _process(
        AddCartItem(
            **identity.owner_fields(),
            product_id=body.product_id,
            quantity=body.quantity,
            variant=variant_json(body.variant),
        )
    )
    return envelope(message="Item added to cart", data=cart_view(load_cart(cart_id)))


@cart_router.put("/items")
async def update_item(body: UpdateItemRequest, identity: Identity = Depends(require_owner)) -> dict:
    cart_id = _process(
        UpdateCartItem(
            **identity.owner_fields(),
            product_id=body.product_id,
            quantity=body.quantity,
            variant=variant_json(body.variant),
        )
    )
    return envelope(message="Cart item updated", data=cart_view(load_cart(cart_id)))


@cart_router.delete("/items")
async def remove_item(body: RemoveItemRequest, identity: Identity = Depends(require_owner)) -> dict:
    cart_id = _process(
        RemoveCartItem(
            **identity.owner_fields(),
            product_id=body.product_id,
            variant=variant_json(body.variant),
        )
    )
    return envelope(message="Item removed from cart", data=cart_view(load_cart(cart_id)))


@cart_router.delete("/clear")
async def clear_cart(identity: Identity = Depends(require_owner)) -> dict:
    cart_id = _process(ClearCart(**identity.owner_fields()))
    return envelope(message="Cart cleared", data=cart_view(load_cart(cart_id)))


@cart_router.post("/merge")
async def merge_cart(body: MergeCartRequest, identity: Identity = Depends(require_member)) -> dict:
    cart_id = _process(MergeGuestCart(user_id=identity.user_id, session_id=body.session_id))
    return envelope(message="Guest cart merged", data=cart_view(load_cart(cart_id)))


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/api/checkout", tags=["checkout"])


def _session_data(identity: Identity) -> dict:
    cart, session = checkout_session(identity.owner)
    return {"cart": cart_view(cart), **session}


@checkout_router.get("/session")
async def get_checkout_session(identity: Identity = Depends(require_owner)) -> dict:
    return envelope(data=_session_data(identity))


@checkout_router.post("/initialize")
async def initialize_checkout(identity: Identity = Depends(require_owner)) -> dict:
    _process(InitializeCheckout(**identity.owner_fields()))
    return envelope(message="Checkout initialized", data=_session_data(identity))


@checkout_router.post("/process", status_code=201)
async def process_checkout(body: ProcessCheckoutRequest, identity: Identity = Depends(require_owner)) -> dict:
    claims = identity.claims
    customer_name = body.customer_name
    if customer_name is None and claims.get("firstName"):
        customer_name = " ".join(part for part in (claims.get("firstName"), claims.get("lastName")) if part)

    order_id = _process(
        ProcessCheckout(
            **identity.owner_fields(),
            shipping_address=json.dumps(body.shipping_address.model_dump()) if body.shipping_address else None,
            billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
            payment_method=body.payment_method,
            shipping_method=body.shipping_method,
            notes=body.notes,
            customer_email=body.customer_email or claims.get("email"),
            customer_name=customer_name,
        )
    )
    return envelope(message="Order placed successfully", data=order_confirmation(load_order(order_id)))


@checkout_router.put("/shipping")
async def update_shipping_method(body: ShippingMethodRequest, identity: Identity = Depends(require_owner)) -> dict:
    _process(UpdateShippingMethod(**identity.owner_fields(), shipping_method=body.shipping_method))
    return envelope(message="Shipping method updated", data=_session_data(identity))


@checkout_router.post("/discount")
async def apply_discount_code(body: DiscountCodeRequest, identity: Identity = Depends(require_owner)) -> dict:
    discount = _process(ApplyDiscountCode(**identity.owner_fields(), code=body.code))
    message = "Discount code applied" if discount else "Discount code is not applicable"
    return envelope(message=message, data=_session_data(identity))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/orders", tags=["orders"])


@order_router.get("/track/{order_number}")
async def track_by_number(order_number: str, email: str | None = Query(default=None)) -> dict:
    return envelope(data=track_order_by_number(order_number, email))


@order_router.get("/history")
async def order_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    identity: Identity = Depends(require_member),
) -> dict:
    return envelope(data=user_order_history(identity.user_id, page, limit))


@order_router.get("/{order_id}")
async def get_order(order_id: str, identity: Identity = Depends(require_member)) -> dict:
    order = load_order_for(order_id, identity.user_id, identity.role)
    return envelope(data=order_detail(order))


@order_router.get("/{order_id}/confirmation")
async def get_confirmation(order_id: str, identity: Identity = Depends(require_member)) -> dict:
    order = load_order_for(order_id, identity.user_id, identity.role)
    return envelope(data=order_confirmation(order))


@order_router.post("/{order_id}/confirmation/email")
async def email_confirmation(order_id: str, identity: Identity = Depends(require_member)) -> dict:
    order = load_order_for(order_id, identity.user_id, identity.role)
    sent = send_order_confirmation_email(order)
    message = "Confirmation email sent" if sent else "Confirmation email could not be sent"
    return envelope(message=message, data={"sent": sent})


@order_router.get("/{order_id}/tracking")
async def get_tracking(order_id: str, identity: Identity = Depends(require_member)) -> dict:
    order = load_order_for(order_id, identity.user_id, identity.role)
    return envelope(data=order_tracking(order))


@order_router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    identity: Identity = Depends(require_member),
) -> dict:
    _process(
        CancelOrder(
            order_id=order_id,
            reason=body.reason if body else None,
            requested_by=identity.user_id,
            requester_role=identity.role,
        )
    )
    return envelope(message="Order cancelled", data=order_detail(load_order(order_id)))


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    identity: Identity = Depends(require_admin),
) -> dict:
    _process(
        UpdateOrderStatus(
            order_id=order_id,
            status=body.status,
            payment_status=body.payment_status,
            tracking_number=body.tracking_number,
            notes=body.notes,
            updated_by=identity.claims.get("email") or identity.user_id,
        )
    )
    return envelope(message="Order status updated", data=order_detail(load_order(order_id)))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/api/products", tags=["products"])


@product_router.get("")
async def list_products() -> dict:
    return envelope(data=list_active_products())


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return envelope(data=product_view(load_product(product_id)))


@product_router.post("", status_code=201)
async def register_product(body: RegisterProductRequest, identity: Identity = Depends(require_admin)) -> dict:
    product_id = _process(RegisterProduct(**body.model_dump()))
    return envelope(message="Product registered", data=product_view(load_product(product_id)))


@product_router.put("/{product_id}/price")
async def update_price(
    product_id: str,
    body: UpdatePriceRequest,
    identity: Identity = Depends(require_admin),
) -> dict:
    _process(UpdateProductPrice(product_id=product_id, base_price=body.base_price, sale_price=body.sale_price))
    return envelope(message="Price updated", data=product_view(load_product(product_id)))


@product_router.put("/{product_id}/status")
async def change_status(
    product_id: str,
    body: ProductStatusRequest,
    identity: Identity = Depends(require_admin),
) -> dict:
    _process(ChangeProductStatus(product_id=product_id, status=body.status))
    return envelope(message="Status updated", data=product_view(load_product(product_id)))


@product_router.post("/{product_id}/stock")
async def adjust_stock(
    product_id: str,
    body: AdjustStockRequest,
    identity: Identity = Depends(require_admin),
) -> dict:
    _process(AdjustStock(product_id=product_id, delta=body.delta))
    return envelope(message="Stock adjusted", data=product_view(load_product(product_id)))


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@maintenance_router.post("/expire-carts")
async def expire_carts(as_of: datetime | None = Query(default=None)) -> dict:
    expired = _process(ExpireCarts(as_of=as_of))
    return envelope(message=f"{expired} cart(s) expired", data={"expired": expired})
