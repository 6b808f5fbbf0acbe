"""Cart line management: commands and handler.

Each command targets the owner's active cart (created on first use) and
checks the catalogue before touching it: the product must exist, be
purchasable and have enough tracked stock for the resulting line quantity.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientInventory, NotFound, Unavailable
from storefront.shared.owner import owner_from

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class AddCartItem:
    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)
    variant = Text()  # JSON object


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    """Set a line's quantity; zero or less removes it."""

    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    variant = Text()


@storefront.command(part_of="ShoppingCart")
class RemoveCartItem:
    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    variant = Text()


def load_purchasable_product(product_id) -> Product:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product not found") from None

    if not product.is_purchasable:
        raise Unavailable(f"{product.name} is not available")
    return product


def ensure_stock(product: Product, quantity: int):
    if not product.has_stock_for(quantity):
        raise InsufficientInventory(
            product_id=str(product.id),
            available=product.stock_quantity,
            requested=quantity,
        )


@storefront.command_handler(part_of=ShoppingCart)
class CartItemsHandler:
    @handle(AddCartItem)
    def add_item(self, command):
        owner = owner_from(command.user_id, command.session_id)
        product = load_purchasable_product(command.product_id)
        quantity = command.quantity if command.quantity is not None else 1

        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create_active(owner)

        # Stock must cover what is already in the cart plus the new quantity
        ensure_stock(product, cart.quantity_of(product.id, command.variant) + quantity)

        cart.add_item(
            product_id=str(product.id),
            quantity=quantity,
            price=product.current_price,
            name=product.name,
            sku=product.sku,
            variant=command.variant,
        )
        repo.add(cart)

        logger.debug("Item added to cart", cart_id=str(cart.id), product_id=str(product.id), quantity=quantity)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_item(self, command):
        owner = owner_from(command.user_id, command.session_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create_active(owner)

        if command.quantity > 0:
            product = load_purchasable_product(command.product_id)
            ensure_stock(product, command.quantity)

        cart.update_item_quantity(command.product_id, command.quantity, command.variant)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        owner = owner_from(command.user_id, command.session_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create_active(owner)

        cart.remove_item(command.product_id, command.variant)
        repo.add(cart)
        return str(cart.id)
