"""Order cancellation — by the customer inside the window, or by the store.

Either way the order must still be Pending, and every reserved unit goes back
to stock in the same unit of work as the status change.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.inventory import ledger
from ordering.order.order import Order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@ordering.command(part_of="Order")
class AdminCancelOrder:
    """Store-side cancellation of a Pending order, with the reason shown to the customer."""

    order_id = Identifier(required=True)
    reason = String(required=True, max_length=200)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        # Someone else's order is reported exactly like a missing one
        if str(order.customer_id) != str(command.customer_id):
            raise ObjectNotFoundError(f"`Order` object with identifier {command.order_id} does not exist.")

        order.cancel()
        ledger.release_all(order.reserved_lines())
        repo.add(order)

    @handle(AdminCancelOrder)
    def admin_cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.cancel_by_admin(command.reason)
        ledger.release_all(order.reserved_lines())
        repo.add(order)
