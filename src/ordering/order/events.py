"""Domain events for the Order aggregate.

All events are versioned, immutable facts about an order's lifecycle. They
drive the customer and agent notifications. No event ever carries a
one-time code.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a Pending order and its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(required=True)
    lines = Text(required=True)  # JSON: list of line snapshots
    total_amount = Float(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)
    cancellation_deadline = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """A Pending order was cancelled, by its customer or by the store."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(required=True)
    reason = String(required=True)
    lines = Text(required=True)  # JSON: the released lines
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class VerificationCodeIssued:
    """A verification code was generated for the order and handed to the notifier."""

    __version__ = 1

    order_id = Identifier(required=True)
    expires_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderVerified:
    """The customer's verification code was accepted; the order moved to Order Received."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_email = String(required=True)
    verified_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderAssigned:
    """A delivery agent took the order out for delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)
    agent_email = String(required=True)
    customer_email = String(required=True)
    shipping_address = Text()  # JSON: address snapshot for the agent
    total_amount = Float(required=True)
    assigned_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderUnassigned:
    """The order's delivery agent was withdrawn and the order returned to Order Received."""

    __version__ = 1

    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)
    unassigned_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """The assigned agent handed the order over and collected payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)
    customer_email = String(required=True)
    delivered_at = DateTime(required=True)
