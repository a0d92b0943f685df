"""Order verification — one-time code issue and confirmation.

``request_verification_code`` stores a fresh code first and emails it only
after that write has committed. If the notifier refuses the message, the code
is withdrawn again, so no undelivered code stays live, and the caller gets
``CodeDeliveryFailed``.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.notifier import get_notifier
from ordering.notifier.templates import VerificationCodeTemplate
from ordering.order.order import Order
from ordering.shared.errors import CodeDeliveryFailed
from ordering.shared.policy import ORDER_CODE_TTL_MINUTES

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class IssueVerificationCode:
    """Store a new code on a Pending order. Delivery is the caller's job."""

    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class WithdrawVerificationCode:
    order_id = Identifier(required=True)
    code = String(required=True, max_length=10)


@ordering.command(part_of="Order")
class ConfirmVerification:
    order_id = Identifier(required=True)
    code = String(required=True, max_length=10)


@ordering.command_handler(part_of=Order)
class VerificationHandler:
    @handle(IssueVerificationCode)
    def issue_verification_code(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        code = order.issue_verification_code()
        repo.add(order)
        return code

    @handle(WithdrawVerificationCode)
    def withdraw_verification_code(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.withdraw_verification_code(command.code)
        repo.add(order)

    @handle(ConfirmVerification)
    def confirm_verification(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm_verification(command.code)
        repo.add(order)


def request_verification_code(order_id) -> None:
    """Issue a code for a Pending order and email it to the customer."""
    code = current_domain.process(IssueVerificationCode(order_id=str(order_id)), asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)

    message = VerificationCodeTemplate.render(
        {"order_id": str(order.id), "code": code, "ttl_minutes": ORDER_CODE_TTL_MINUTES}
    )
    if not get_notifier().send(order.customer_email, message["subject"], message["text"], message["html"]):
        logger.warning("Verification code could not be delivered", order_id=str(order.id))
        current_domain.process(WithdrawVerificationCode(order_id=str(order.id), code=code), asynchronous=False)
        raise CodeDeliveryFailed("Could not deliver the verification code, please try again")

    logger.info("Verification code issued", order_id=str(order.id))
