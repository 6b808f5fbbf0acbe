"""Order cancellation: command and handler.

Only the member who placed the order, or an admin, may cancel it. Stock
taken at checkout is put back only when ``RESTOCK_ON_CANCEL`` is enabled;
by default a cancelled order keeps its inventory decrement.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.order.order import Order
from storefront.shared.owner import ADMIN_ROLE

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = Text()
    requested_by = Identifier(required=True)
    requester_role = String(max_length=20)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if command.requester_role != ADMIN_ROLE and not order.is_owned_by(command.requested_by):
            raise Forbidden("You can only cancel your own orders")

        restock = get_settings().restock_on_cancel
        order.cancel(reason=command.reason, cancelled_by=str(command.requested_by), restocked=restock)

        if restock:
            product_repo = current_domain.repository_for(Product)
            products = product_repo.find_many(item.product_id for item in order.items)
            for item in order.items:
                product = products.get(str(item.product_id))
                if product is not None:
                    product.restock(item.quantity)
            for product in products.values():
                product_repo.add(product)

        repo.add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            cancelled_by=str(command.requested_by),
            restocked=restock,
        )
        return order.status
