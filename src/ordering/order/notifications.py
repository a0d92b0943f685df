"""Order notifications — emails sent after an order change has been committed.

These handlers run only once the change is committed, so their log lines
record what actually happened. Delivery is best-effort: a failed send is
logged and the order change stands.
"""

import json

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.notifier import get_notifier
from ordering.notifier.templates import (
    AgentAssignmentTemplate,
    CustomerAssignmentTemplate,
    OrderCancelledTemplate,
    OrderDeliveredTemplate,
    OrderPlacedTemplate,
    OrderVerifiedTemplate,
)
from ordering.order.events import (
    OrderAssigned,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderVerified,
)
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def _timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "N/A"


def notify(to: str, template, context: dict) -> bool:
    """Render ``template`` and send it. Returns the notifier's verdict."""
    message = template.render(context)
    sent = get_notifier().send(to, message["subject"], message["text"], message["html"])
    if not sent:
        logger.warning(
            "Notification not delivered",
            to=to,
            subject=message["subject"],
            order_id=context.get("order_id"),
        )
    return sent


@ordering.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Tells customers and delivery agents about order lifecycle changes."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        logger.info(
            "Order placed",
            order_id=str(event.order_id),
            customer_id=str(event.customer_id),
            total_amount=event.total_amount,
        )
        notify(
            event.customer_email,
            OrderPlacedTemplate,
            {
                "order_id": str(event.order_id),
                "lines": json.loads(event.lines),
                "total_amount": event.total_amount,
                "cancellation_deadline": _timestamp(event.cancellation_deadline),
            },
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        logger.info(
            "Order cancelled",
            order_id=str(event.order_id),
            customer_id=str(event.customer_id),
            reason=event.reason,
            released_lines=len(json.loads(event.lines)),
        )
        notify(
            event.customer_email,
            OrderCancelledTemplate,
            {"order_id": str(event.order_id), "reason": event.reason},
        )

    @handle(OrderVerified)
    def on_order_verified(self, event: OrderVerified) -> None:
        notify(event.customer_email, OrderVerifiedTemplate, {"order_id": str(event.order_id)})

    @handle(OrderAssigned)
    def on_order_assigned(self, event: OrderAssigned) -> None:
        context = {
            "order_id": str(event.order_id),
            "agent_email": event.agent_email,
            "total_amount": event.total_amount,
            "shipping_address": json.loads(event.shipping_address) if event.shipping_address else {},
        }
        notify(event.agent_email, AgentAssignmentTemplate, context)
        notify(event.customer_email, CustomerAssignmentTemplate, context)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        notify(
            event.customer_email,
            OrderDeliveredTemplate,
            {"order_id": str(event.order_id), "delivered_at": _timestamp(event.delivered_at)},
        )
