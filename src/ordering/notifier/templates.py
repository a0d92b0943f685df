"""Email templates for order and account notifications.

Each template renders a context dict into ``subject``, ``text`` and ``html``
parts ready for ``Notifier.send``.
"""

from html import escape

SIGNATURE = "Thank you for shopping with us!"


def _html(*paragraphs: str) -> str:
    return "".join(f"<p>{escape(paragraph)}</p>" for paragraph in paragraphs)


def _render(subject: str, *paragraphs: str) -> dict:
    return {
        "subject": subject,
        "text": "\n\n".join(paragraphs),
        "html": _html(*paragraphs),
    }


class OrderPlacedTemplate:
    """Sent to the customer once an order has been committed."""

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        lines = context.get("lines", [])
        summary = "\n".join(f"{line['quantity']} x {line['name']} @ {line['price_at_order']:.2f}" for line in lines)
        return _render(
            f"Order #{order_id} placed",
            f"We have received your order #{order_id}.",
            summary or "No items.",
            f"Order total: {context.get('total_amount', 0.0):.2f} (cash on delivery)",
            f"You can cancel this order until {context.get('cancellation_deadline', 'N/A')}.",
            SIGNATURE,
        )


class OrderCancelledTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return _render(
            f"Order #{order_id} cancelled",
            f"Your order #{order_id} has been cancelled.",
            f"Reason: {context.get('reason', 'N/A')}",
            SIGNATURE,
        )


class VerificationCodeTemplate:
    """Carries the one-time code a customer needs to confirm their order."""

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return _render(
            f"Verification code for order #{order_id}",
            f"Your verification code is {context['code']}.",
            f"It expires in {context.get('ttl_minutes', 10)} minutes. Do not share it with anyone.",
        )


class OrderVerifiedTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return _render(
            f"Order #{order_id} confirmed",
            f"Your order #{order_id} has been verified and is being prepared for delivery.",
            SIGNATURE,
        )


class AgentAssignmentTemplate:
    """Sent to the delivery agent who was given the order."""

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        address = context.get("shipping_address") or {}
        destination = ", ".join(
            part
            for part in (
                address.get("name"),
                address.get("phone"),
                address.get("landmark"),
                address.get("city"),
                address.get("postal_code"),
            )
            if part
        )
        return _render(
            f"New delivery assigned: order #{order_id}",
            f"Order #{order_id} has been assigned to you.",
            f"Deliver to: {destination or 'N/A'}",
            f"Collect {context.get('total_amount', 0.0):.2f} in cash on delivery.",
        )


class CustomerAssignmentTemplate:
    """Sent to the customer when a delivery agent takes the order out."""

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return _render(
            f"Order #{order_id} is out for delivery",
            f"Your order #{order_id} is out for delivery.",
            f"Your delivery agent can be reached at {context.get('agent_email', 'N/A')}.",
            SIGNATURE,
        )


class OrderDeliveredTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return _render(
            f"Order #{order_id} delivered",
            f"Your order #{order_id} was delivered on {context.get('delivered_at', 'N/A')}.",
            SIGNATURE,
        )


class AccountCodeTemplate:
    """One-time code for email verification or password reset."""

    @staticmethod
    def render(context: dict) -> dict:
        purpose = context.get("purpose", "account")
        return _render(
            f"Your {purpose.lower()} code",
            f"Your {purpose.lower()} code is {context['code']}.",
            f"It expires in {context.get('ttl_minutes', 10)} minutes. If you did not ask for it, ignore this email.",
        )
