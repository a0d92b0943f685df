"""Typed failures raised by the ordering domain.

All of them derive from Protean's own exceptions, so a failure raised inside a
command handler aborts the unit of work and the HTTP layer maps it by type.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class InsufficientStock(ValidationError):
    """A product does not have enough stock to cover the requested quantity."""

    def __init__(self, product_id, requested, available):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock for product {product_id}: {available} available, {requested} requested"
                ]
            }
        )


class InvalidOrExpiredCode(ValidationError):
    """A one-time code did not match, or matched after it expired."""

    def __init__(self, field="code"):
        super().__init__({field: ["Invalid or expired code"]})


class InvalidState(InvalidOperationError):
    """The order is not in a state that allows the requested transition."""


class NotCancellable(InvalidState):
    """The order is no longer Pending, or its cancellation window has closed."""


class CodeDeliveryFailed(InvalidOperationError):
    """The notifier could not deliver a one-time code, so the code was discarded."""


class AgentNotFound(ObjectNotFoundError):
    """No active delivery agent exists with the given identifier."""

    def __init__(self, agent_id):
        self.agent_id = str(agent_id)
        super().__init__({"agent_id": [f"No active delivery agent `{agent_id}`"]})
