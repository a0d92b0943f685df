"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart, cart_for
from ordering.domain import ordering
from ordering.inventory.product import Product


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        cart = cart_for(command.customer_id)
        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            available=product.stock,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        cart = cart_for(command.customer_id)
        cart.update_item_quantity(
            product_id=command.product_id,
            new_quantity=command.quantity,
            available=product.stock,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = cart_for(command.customer_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)
