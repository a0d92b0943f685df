"""Account management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.account.account import Account, AccountRole
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Account")
class RegisterAccount:
    email = String(required=True, max_length=254)
    name = String(max_length=100)
    role = String(choices=AccountRole, default=AccountRole.CUSTOMER.value)


@ordering.command(part_of="Account")
class SaveShippingAddress:
    account_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)
    postal_code = String(required=True, max_length=12)
    city = String(required=True, max_length=100)
    landmark = String(max_length=255)


@ordering.command(part_of="Account")
class RemoveAccount:
    """Remove an account. Orders held by a removed delivery agent go back to the pool."""

    account_id = Identifier(required=True)


@ordering.command_handler(part_of=Account)
class ManageAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        account = Account.register(
            email=command.email,
            name=command.name,
            role=command.role,
        )
        current_domain.repository_for(Account).add(account)
        return str(account.id)

    @handle(SaveShippingAddress)
    def save_shipping_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.save_shipping_address(
            name=command.name,
            phone=command.phone,
            postal_code=command.postal_code,
            city=command.city,
            landmark=command.landmark,
        )
        repo.add(account)

    @handle(RemoveAccount)
    def remove_account(self, command):
        from ordering.order.assignment import unassign_agent_orders

        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        was_agent = account.is_delivery_agent
        account.remove()
        repo.add(account)

        released = unassign_agent_orders(str(account.id)) if was_agent else 0
        logger.info(
            "Account removed",
            account_id=str(account.id),
            role=account.role,
            orders_released=released,
        )
        return released
