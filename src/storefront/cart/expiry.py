"""Cart expiry sweep: command and handler for retiring stale carts.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob) via the maintenance API endpoint. Active carts whose ``expires_at``
has passed are marked expired so that the next request from their owner
starts a fresh cart.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ExpireCarts:
    """Expire active carts past their expiry timestamp."""

    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=ShoppingCart)
class ExpireCartsHandler:
    @handle(ExpireCarts)
    def expire_carts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(ShoppingCart)

        logger.info("Sweeping expired carts", as_of=as_of.isoformat())

        expired = [cart for cart in repo.all_active() if cart.is_expired(as_of)]
        if not expired:
            logger.info("No expired carts found")
            return 0

        for cart in expired:
            cart.expire(as_of)
            repo.add(cart)

        logger.info("Expired carts", count=len(expired))
        return len(expired)
