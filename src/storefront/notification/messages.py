"""Customer and staff notices, and the email each one is rendered to."""

from enum import Enum

from storefront.notification.email_port import EmailMessage


class Notice(Enum):
    ORDER_PLACED = "order-placed"
    ORDER_CONFIRMED = "order-confirmed"
    ORDER_SHIPPED = "order-shipped"
    ORDER_DELIVERED = "order-delivered"
    ORDER_CANCELLED = "order-cancelled"
    LOW_STOCK = "low-stock"


def _money(amount, currency):
    return f"{currency or 'USD'} {amount or 0.0:.2f}"


def _order_placed(context):
    number = context["order_number"]
    currency = context.get("currency")
    lines = [
        f"  {item['quantity']} x {item['name']} @ {_money(item['price'], currency)}" for item in context.get("items", [])
    ]
    totals = [
        f"{label}: {_money(context.get(key), currency)}"
        for label, key in (
            ("Subtotal", "subtotal"),
            ("Tax", "tax"),
            ("Shipping", "shipping"),
            ("Discount", "discount"),
            ("Order total", "total"),
        )
    ]
    body = "\n".join(
        [
            f"Hi {context.get('customer_name') or 'there'},",
            "",
            f"Thank you for your order #{number}.",
            "",
            *lines,
            "",
            *totals,
            "",
            f"Estimated delivery: {context.get('estimated_delivery') or 'soon'}",
        ]
    )
    return f"Order Confirmation - {number}", body


def _order_confirmed(context):
    number = context["order_number"]
    return f"Order #{number} confirmed", f"Your order #{number} is confirmed. We will email you when it ships."


def _order_shipped(context):
    number = context["order_number"]
    tracking = context.get("tracking_number") or "not yet available"
    return f"Order #{number} has shipped", f"Your order #{number} is on its way.\n\nTracking number: {tracking}"


def _order_delivered(context):
    number = context["order_number"]
    return (
        f"Order #{number} delivered",
        f"Your order #{number} has been delivered. Reply to this email if anything is wrong with it.",
    )


def _order_cancelled(context):
    number = context["order_number"]
    reason = context.get("reason") or "at your request"
    return (
        f"Order #{number} cancelled",
        f"Your order #{number} has been cancelled.\n\nReason: {reason}\n\n"
        "Any captured payment will be refunded.",
    )


def _low_stock(context):
    sku = context["sku"]
    return (
        f"Low stock: {sku}",
        f"Only {context['remaining']} left of {sku} (threshold {context['threshold']}).",
    )


_RENDERERS = {
    Notice.ORDER_PLACED: _order_placed,
    Notice.ORDER_CONFIRMED: _order_confirmed,
    Notice.ORDER_SHIPPED: _order_shipped,
    Notice.ORDER_DELIVERED: _order_delivered,
    Notice.ORDER_CANCELLED: _order_cancelled,
    Notice.LOW_STOCK: _low_stock,
}


def compose(notice: Notice, to: str, context: dict) -> EmailMessage:
    subject, body = _RENDERERS[notice](context)
    return EmailMessage(to=to, subject=subject, body=body, notice=notice.value)
