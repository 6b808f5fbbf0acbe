"""Order read side: confirmation, tracking and history views.

Access rules: members see their own orders and admins see every order.
Public tracking by order number needs no account, but when an email is
supplied it must match the one captured at checkout.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.errors import Forbidden, NotFound
from storefront.notification.dispatch import notify
from storefront.notification.messages import Notice
from storefront.order.order import Order
from storefront.projections.order_status_history import history_for
from storefront.shared.owner import ADMIN_ROLE

logger = structlog.get_logger(__name__)


def _address(value) -> dict | None:
    if value is None:
        return None
    return {
        "first_name": value.first_name,
        "last_name": value.last_name,
        "company": value.company,
        "street": value.street,
        "city": value.city,
        "state": value.state,
        "zip_code": value.zip_code,
        "country": value.country,
        "phone": value.phone,
    }


def _items(order) -> list[dict]:
    return [
        {
            "product_id": str(item.product_id),
            "name": item.name,
            "sku": item.sku,
            "price": item.price,
            "quantity": item.quantity,
            "total": item.total,
            "variant": json.loads(item.variant) if item.variant else {},
        }
        for item in order.items
    ]


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound("Order not found") from None


def load_order_for(order_id, user_id, role=None) -> Order:
    order = load_order(order_id)
    if role != ADMIN_ROLE and not order.is_owned_by(user_id):
        raise Forbidden("Access denied")
    return order


def order_detail(order: Order) -> dict:
    pricing = order.pricing
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "items": _items(order),
        "pricing": {
            "subtotal": pricing.subtotal,
            "tax": pricing.tax,
            "shipping": pricing.shipping,
            "discount": pricing.discount,
            "total": pricing.total,
            "currency": pricing.currency,
        },
        "shipping": {
            "method": order.shipping_method,
            "address": _address(order.shipping_address),
            "tracking_number": order.tracking_number,
            "estimated_delivery": order.estimated_delivery,
            "delivered_at": order.delivered_at,
        },
        "billing": {
            "address": _address(order.billing_address),
            "same_as_shipping": order.billing_same_as_shipping,
        },
        "payment": {
            "method": order.payment_method,
            "status": order.payment_status,
            "transaction_id": order.transaction_id,
            "paid_at": order.paid_at,
            "refunded_at": order.refunded_at,
        },
        "notes": order.notes,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def order_confirmation(order: Order) -> dict:
    """Flat confirmation record for a placed order."""
    pricing = order.pricing
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "customer_email": order.customer_email or "",
        "customer_name": order.customer_name or "",
        "items": _items(order),
        "subtotal": pricing.subtotal,
        "tax": pricing.tax,
        "shipping": pricing.shipping,
        "discount": pricing.discount,
        "total": pricing.total,
        "currency": pricing.currency,
        "shipping_address": _address(order.shipping_address),
        "billing_address": _address(order.billing_address),
        "payment_method": order.payment_method,
        "order_date": order.created_at,
        "estimated_delivery": order.estimated_delivery,
    }


def send_order_confirmation_email(order: Order) -> bool:
    confirmation = order_confirmation(order)
    context = {
        **confirmation,
        "estimated_delivery": order.estimated_delivery.date().isoformat() if order.estimated_delivery else "soon",
    }
    sent = notify(Notice.ORDER_PLACED, order.customer_email, context)
    if not sent:
        logger.warning("Order confirmation email not sent", order_id=str(order.id))
    return sent


def order_tracking(order: Order) -> dict:
    return {
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "tracking_number": order.tracking_number,
        "order_date": order.created_at,
        "last_updated": order.updated_at,
        "estimated_delivery": order.estimated_delivery,
        "shipping_address": _address(order.shipping_address),
        "status_history": history_for(order.id),
    }


def track_order_by_number(order_number: str, email: str | None = None) -> dict:
    order = current_domain.repository_for(Order).find_by_number(order_number)
    if order is None:
        raise NotFound("Order not found")

    if email and (order.customer_email or "").lower() != email.strip().lower():
        raise Forbidden("Email does not match order")

    return {
        **order_tracking(order),
        "items": [
            {"name": item["name"], "quantity": item["quantity"], "price": item["price"]} for item in _items(order)
        ],
        "total": order.pricing.total,
        "currency": order.pricing.currency,
    }


def user_order_history(user_id, page: int = 1, limit: int = 10) -> dict:
    page = max(page, 1)
    limit = max(limit, 1)
    orders, total = current_domain.repository_for(Order).history_for(user_id, page, limit)
    total_pages = (total + limit - 1) // limit

    return {
        "orders": [
            {
                "order_id": str(order.id),
                "order_number": order.order_number,
                "status": order.status,
                "payment_status": order.payment_status,
                "total": order.pricing.total,
                "currency": order.pricing.currency,
                "item_count": sum(item.quantity for item in order.items),
                "created_at": order.created_at,
            }
            for order in orders
        ],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "total_orders": total,
            "has_next_page": page < total_pages,
            "has_prev_page": page > 1,
        },
    }
