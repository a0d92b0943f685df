"""Read side for orders — listings and the per-order view.

The cancellation deadline is evaluated here, at read time, to decide whether
the customer is offered the cancel action. Nothing expires orders in the
background.
"""

from protean.utils.globals import current_domain

from ordering.order.order import AGENT_HELD_STATES, Order
from ordering.utils import clock


def _iso(value):
    return clock.as_utc(value).isoformat() if value else None


def order_view(order: Order, now=None) -> dict:
    """Plain-dict view of an order. Never includes the verification code."""
    now = now or clock.utc_now()
    return {
        "order_id": str(order.id),
        "customer_id": str(order.customer_id),
        "customer_email": order.customer_email,
        "status": order.status,
        "lines": order.line_snapshots(),
        "total_amount": order.total_amount,
        "payment_method": order.payment_method,
        "shipping_address": order.shipping_address.to_dict() if order.shipping_address else None,
        "placed_at": _iso(order.placed_at),
        "cancellation_deadline": _iso(order.cancellation_deadline),
        "is_cancellable": order.is_cancellable(now),
        "cancellation_reason": order.cancellation_reason,
        "assigned_agent_id": str(order.assigned_agent_id) if order.assigned_agent_id else None,
        "assigned_agent_email": order.assigned_agent_email,
        "delivered_at": _iso(order.delivered_at),
    }


def orders_for_customer(customer_id) -> list[Order]:
    """The customer's orders, newest first."""
    query = current_domain.repository_for(Order)._dao.query.filter(customer_id=str(customer_id))
    # limit(None) must be the last clone; a later one falls back to the entity default of 100
    orders = query.limit(None).all().items
    return sorted(orders, key=lambda o: clock.as_utc(o.placed_at), reverse=True)


def agent_held_orders(agent_id) -> list[Order]:
    """Every order the agent is assigned to that is not yet Delivered or Cancelled."""
    query = current_domain.repository_for(Order)._dao.query.filter(
        assigned_agent_id=str(agent_id),
        status__in=AGENT_HELD_STATES,
    )
    return query.limit(None).all().items


def active_orders_for_agent(agent_id) -> list[Order]:
    """Orders the agent still has to deliver, oldest first."""
    return sorted(agent_held_orders(agent_id), key=lambda o: clock.as_utc(o.placed_at))
