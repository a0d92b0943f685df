"""Order placement — checkout of the persisted cart into a Pending order."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.account.account import Account
from ordering.cart.cart import ShoppingCart, cart_for
from ordering.domain import ordering
from ordering.inventory import ledger
from ordering.order.order import Order


@ordering.command(part_of="Order")
class PlaceOrder:
    """Check out the customer's stored cart. Any cart the caller holds is ignored."""

    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        account = current_domain.repository_for(Account).get(command.customer_id)
        if not account.is_active:
            raise ValidationError({"customer_id": ["Account has been removed"]})
        if not account.has_complete_address():
            raise ValidationError({"shipping_address": ["A complete shipping address is required to place an order"]})

        cart = cart_for(command.customer_id)
        if cart.is_empty:
            raise ValidationError({"cart": ["Cannot place an order from an empty cart"]})

        # All lines are reserved or none are; a failure here aborts the unit of work
        products = ledger.reserve_all(cart.lines())

        lines_data = [
            {
                "product_id": product_id,
                "name": products[product_id].name,
                "price_at_order": products[product_id].price,
                "quantity": quantity,
                "image_url": products[product_id].image_url,
            }
            for product_id, quantity in cart.lines()
        ]
        order = Order.place(
            customer_id=command.customer_id,
            customer_email=account.email,
            lines_data=lines_data,
            shipping_address=account.shipping_address,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)

        return str(order.id)
