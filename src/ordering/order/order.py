"""Order aggregate (CQRS) — an immutable snapshot of a checked-out cart.

The order copies each product's name, price and image, and the customer's
shipping address, at the moment of checkout. Later catalogue or address
changes never reach an existing order. After placement only the lifecycle
fields move, and only along the transitions below.

State Machine:
    PENDING → ORDER_RECEIVED → OUT_FOR_DELIVERY → DELIVERED
    ORDER_RECEIVED → DELIVERED       (direct hand-over by the assigned agent)
    OUT_FOR_DELIVERY → ORDER_RECEIVED (agent withdrawn)
    PENDING → CANCELLED              (customer inside the cancellation window, or the store)
"""

import json
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.order.events import (
    OrderAssigned,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderUnassigned,
    OrderVerified,
    VerificationCodeIssued,
)
from ordering.shared import otp
from ordering.shared.address import ShippingAddress
from ordering.shared.errors import InvalidOrExpiredCode, InvalidState, NotCancellable
from ordering.shared.policy import CANCELLATION_WINDOW, ORDER_CODE_TTL_MINUTES, PAYMENT_METHOD
from ordering.utils import clock


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    ORDER_RECEIVED = "Order Received"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


CUSTOMER_CANCELLATION_REASON = "Cancelled by customer"
ADMIN_CANCELLATION_PREFIX = "Cancelled by store: "

# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.ORDER_RECEIVED, OrderStatus.CANCELLED},
    OrderStatus.ORDER_RECEIVED: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED},
    OrderStatus.OUT_FOR_DELIVERY: {
        OrderStatus.DELIVERED,
        OrderStatus.ORDER_RECEIVED,  # Agent withdrawn
    },
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses in which an assigned agent still holds the order
AGENT_HELD_STATES = [OrderStatus.ORDER_RECEIVED.value, OrderStatus.OUT_FOR_DELIVERY.value]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """One product line, frozen at checkout with the price the customer agreed to."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price_at_order = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_url = String(max_length=1024)

    @property
    def subtotal(self) -> float:
        return self.price_at_order * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_email = String(required=True, max_length=254)
    lines = HasMany(OrderLine)
    total_amount = Float(required=True, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(max_length=10, default=PAYMENT_METHOD)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    placed_at = DateTime(required=True)
    cancellation_deadline = DateTime(required=True)
    cancellation_reason = String(max_length=500)
    cancelled_at = DateTime()
    verification_code = String(max_length=10)
    verification_code_expires_at = DateTime()
    assigned_agent_id = Identifier()
    assigned_agent_email = String(max_length=254)
    delivered_at = DateTime()

    @invariant.post
    def total_must_match_lines(self):
        if not self.lines:
            return
        expected = round(sum(line.subtotal for line in self.lines), 2)
        if abs(expected - (self.total_amount or 0.0)) > 0.005:
            raise ValidationError({"total_amount": [f"Total {self.total_amount} does not match lines {expected}"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, customer_email, lines_data, shipping_address, now=None):
        """Create a Pending order from a snapshot of cart lines.

        Args:
            customer_id: The customer placing the order.
            customer_email: Where order notifications go.
            lines_data: List of dicts with product_id, name, price_at_order,
                        quantity and image_url, as read at checkout.
            shipping_address: The customer's ShippingAddress at checkout.
        """
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        now = now or clock.utc_now()
        deadline = now + CANCELLATION_WINDOW
        lines = [OrderLine(**line) for line in lines_data]
        total = round(sum(line.subtotal for line in lines), 2)

        order = cls(
            customer_id=str(customer_id),
            customer_email=customer_email,
            lines=lines,
            total_amount=total,
            shipping_address=shipping_address,
            payment_method=PAYMENT_METHOD,
            status=OrderStatus.PENDING.value,
            placed_at=now,
            cancellation_deadline=deadline,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                customer_email=customer_email,
                lines=json.dumps(order.line_snapshots()),
                total_amount=total,
                payment_method=PAYMENT_METHOD,
                placed_at=now,
                cancellation_deadline=deadline,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidState(f"Cannot move order from {current.value} to {target_status.value}")

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    def line_snapshots(self) -> list[dict]:
        return [
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "price_at_order": line.price_at_order,
                "quantity": line.quantity,
                "image_url": line.image_url,
            }
            for line in self.lines
        ]

    def reserved_lines(self) -> list[tuple[str, int]]:
        """The stock this order holds, as ``(product_id, quantity)`` pairs."""
        return [(str(line.product_id), line.quantity) for line in self.lines]

    def is_cancellable(self, now=None) -> bool:
        """True while the order is Pending and its cancellation deadline has not passed."""
        now = now or clock.utc_now()
        return self.status == OrderStatus.PENDING.value and now < clock.as_utc(self.cancellation_deadline)

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, now=None):
        """Cancel on the customer's behalf. Stock release is the caller's job."""
        now = now or clock.utc_now()
        if self.status != OrderStatus.PENDING.value:
            raise NotCancellable(f"Only Pending orders can be cancelled, this order is {self.status}")
        if not self.is_cancellable(now):
            raise NotCancellable("The cancellation window for this order has closed")

        self._cancel(CUSTOMER_CANCELLATION_REASON, now)

    def cancel_by_admin(self, reason, now=None):
        """Cancel a Pending order for a store reason, regardless of the customer's window."""
        if self.status != OrderStatus.PENDING.value:
            raise NotCancellable(f"Only Pending orders can be cancelled, this order is {self.status}")
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A cancellation reason is required"]})

        self._cancel(f"{ADMIN_CANCELLATION_PREFIX}{reason.strip()}", now or clock.utc_now())

    def _cancel(self, reason, now):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.verification_code = None
        self.verification_code_expires_at = None
        self.assigned_agent_id = None
        self.assigned_agent_email = None
        self.delivered_at = None

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                customer_email=self.customer_email,
                reason=reason,
                lines=json.dumps(self.line_snapshots()),
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------
    def issue_verification_code(self, now=None):
        """Generate and store a fresh code, replacing any earlier one. Returns the code."""
        if self.status != OrderStatus.PENDING.value:
            raise InvalidState(f"Verification codes are only issued for Pending orders, this order is {self.status}")

        code = otp.generate_code()
        expires_at = otp.expiry_at(ORDER_CODE_TTL_MINUTES, now=now)
        self.verification_code = code
        self.verification_code_expires_at = expires_at

        self.raise_(VerificationCodeIssued(order_id=str(self.id), expires_at=expires_at))
        return code

    def withdraw_verification_code(self, code):
        """Forget ``code`` if it is still the live one. A newer code is kept."""
        if self.verification_code == code:
            self.verification_code = None
            self.verification_code_expires_at = None

    def confirm_verification(self, code, now=None):
        """Accept the customer's code and move the order to Order Received.

        A wrong or expired code leaves the order untouched, so a correct code
        can still be entered until it expires.
        """
        if self.status != OrderStatus.PENDING.value:
            raise InvalidState(f"Only Pending orders can be verified, this order is {self.status}")

        now = now or clock.utc_now()
        expires_at = clock.as_utc(self.verification_code_expires_at)
        if not otp.code_matches(self.verification_code, code) or expires_at is None or now >= expires_at:
            raise InvalidOrExpiredCode()

        self._assert_can_transition(OrderStatus.ORDER_RECEIVED)
        self.status = OrderStatus.ORDER_RECEIVED.value
        self.verification_code = None
        self.verification_code_expires_at = None

        self.raise_(
            OrderVerified(
                order_id=str(self.id),
                customer_email=self.customer_email,
                verified_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Assignment & delivery
    # -------------------------------------------------------------------
    def assign(self, agent_id, agent_email, now=None):
        if self.status != OrderStatus.ORDER_RECEIVED.value:
            raise InvalidState(f"Only orders in Order Received can be assigned, this order is {self.status}")

        self._assert_can_transition(OrderStatus.OUT_FOR_DELIVERY)
        now = now or clock.utc_now()
        self.assigned_agent_id = str(agent_id)
        self.assigned_agent_email = agent_email
        self.status = OrderStatus.OUT_FOR_DELIVERY.value

        self.raise_(
            OrderAssigned(
                order_id=str(self.id),
                agent_id=str(agent_id),
                agent_email=agent_email,
                customer_email=self.customer_email,
                shipping_address=json.dumps(self.shipping_address.to_dict()) if self.shipping_address else None,
                total_amount=self.total_amount,
                assigned_at=now,
            )
        )

    def unassign(self, now=None):
        """Withdraw the delivery agent and put the order back in Order Received."""
        if OrderStatus(self.status) not in (OrderStatus.ORDER_RECEIVED, OrderStatus.OUT_FOR_DELIVERY):
            raise InvalidState(f"Cannot unassign a {self.status} order")
        if not self.assigned_agent_id:
            raise InvalidState("Order has no delivery agent to withdraw")

        agent_id = self.assigned_agent_id
        self.assigned_agent_id = None
        self.assigned_agent_email = None
        self.status = OrderStatus.ORDER_RECEIVED.value

        self.raise_(
            OrderUnassigned(
                order_id=str(self.id),
                agent_id=str(agent_id),
                unassigned_at=now or clock.utc_now(),
            )
        )

    def mark_delivered(self, agent_id, now=None):
        if not self.assigned_agent_id or str(self.assigned_agent_id) != str(agent_id):
            raise InvalidState("Order is not assigned to this delivery agent")
        if OrderStatus(self.status) not in (OrderStatus.ORDER_RECEIVED, OrderStatus.OUT_FOR_DELIVERY):
            raise InvalidState(f"Cannot deliver an order in {self.status}")

        self._assert_can_transition(OrderStatus.DELIVERED)
        now = now or clock.utc_now()
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                agent_id=str(agent_id),
                customer_email=self.customer_email,
                delivered_at=now,
            )
        )
