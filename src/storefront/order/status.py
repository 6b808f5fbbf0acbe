"""Order status updates: command and handler (staff only).

Any status may be written from any status. Payment status, tracking number
and an internal note can be recorded in the same update.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    payment_status = String(max_length=20)
    tracking_number = String(max_length=255)
    notes = Text()
    updated_by = String(max_length=255)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        order.change_status(
            command.status,
            payment_status=command.payment_status,
            tracking_number=command.tracking_number,
            notes=command.notes,
            changed_by=command.updated_by,
        )
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
            updated_by=command.updated_by,
        )
        return order.status
