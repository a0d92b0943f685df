"""Assignment router — hands verified orders to delivery agents.

An order can only be assigned while it is in Order Received, and only to an
active Delivery Agent account. Withdrawing an agent (for example when the
agent's account is removed) returns every order they still hold to Order
Received so it can be assigned again. An agent can also hand back a single
order that is Out for Delivery.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.account.account import Account
from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus
from ordering.order.queries import agent_held_orders
from ordering.shared.errors import AgentNotFound, InvalidState

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AssignOrder:
    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)


@ordering.command(part_of="Order")
class UnassignOrder:
    """The assigned agent hands one order back to Order Received."""

    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)


@ordering.command(part_of="Order")
class UnassignAgentOrders:
    """Return all active orders of one agent to Order Received."""

    agent_id = Identifier(required=True)


def active_agent(agent_id) -> Account:
    """Load the delivery agent, or raise AgentNotFound if there is no active one."""
    try:
        agent = current_domain.repository_for(Account).get(agent_id)
    except ObjectNotFoundError as exc:
        raise AgentNotFound(agent_id) from exc
    if not agent.is_delivery_agent:
        raise AgentNotFound(agent_id)
    return agent


def unassign_agent_orders(agent_id) -> int:
    """Withdraw ``agent_id`` from every order they hold that is not yet finished.

    Returns the number of orders released.
    """
    repo = current_domain.repository_for(Order)

    released = 0
    for order in agent_held_orders(agent_id):
        order.unassign()
        repo.add(order)
        released += 1

    logger.info("Agent withdrawn from orders", agent_id=str(agent_id), orders_released=released)
    return released


@ordering.command_handler(part_of=Order)
class AssignmentHandler:
    @handle(AssignOrder)
    def assign_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.status != OrderStatus.ORDER_RECEIVED.value:
            raise InvalidState(f"Only orders in Order Received can be assigned, this order is {order.status}")

        agent = active_agent(command.agent_id)
        order.assign(agent_id=str(agent.id), agent_email=agent.email)
        repo.add(order)

        logger.info("Order assigned", order_id=str(order.id), agent_id=str(agent.id))

    @handle(UnassignOrder)
    def unassign_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if str(order.assigned_agent_id or "") != str(command.agent_id):
            raise InvalidState("Order is not assigned to this delivery agent")
        if order.status != OrderStatus.OUT_FOR_DELIVERY.value:
            raise InvalidState(f"Only orders Out for Delivery can be handed back, this order is {order.status}")

        order.unassign()
        repo.add(order)

        logger.info("Agent withdrew from order", order_id=str(order.id), agent_id=str(command.agent_id))

    @handle(UnassignAgentOrders)
    def unassign_agent_orders(self, command):
        return unassign_agent_orders(command.agent_id)
