"""Storefront bounded context: catalogue, shopping cart, checkout and orders.

Carts are mutated through commands, validated and priced at checkout, and
converted into immutable Orders in a single unit of work that also
decrements product stock.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
