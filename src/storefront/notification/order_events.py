"""Customer notices for order status changes.

Confirmed, shipped, delivered and cancelled orders trigger an email to the
address captured at checkout. Other statuses are silent.
"""

from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.dispatch import notify
from storefront.notification.messages import Notice
from storefront.order.events import OrderStatusChanged
from storefront.order.order import Order, OrderStatus

_NOTICE_FOR_STATUS = {
    OrderStatus.CONFIRMED.value: Notice.ORDER_CONFIRMED,
    OrderStatus.SHIPPED.value: Notice.ORDER_SHIPPED,
    OrderStatus.DELIVERED.value: Notice.ORDER_DELIVERED,
    OrderStatus.CANCELLED.value: Notice.ORDER_CANCELLED,
}


@storefront.event_handler(part_of=Order)
class OrderNotificationHandler:
    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        notice = _NOTICE_FOR_STATUS.get(event.new_status)
        if notice is None:
            return

        notify(
            notice,
            event.customer_email,
            {
                "order_number": event.order_number,
                "tracking_number": event.tracking_number,
                "reason": event.note,
            },
        )
