"""Account one-time codes — email verification and password reset.

As with order codes, a code is stored before it is emailed and withdrawn again
if the email is refused.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.account.account import Account, CodePurpose
from ordering.domain import ordering
from ordering.notifier import get_notifier
from ordering.notifier.templates import AccountCodeTemplate
from ordering.shared.errors import CodeDeliveryFailed
from ordering.shared.policy import ACCOUNT_CODE_TTL_MINUTES

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Account")
class IssueAccountCode:
    account_id = Identifier(required=True)
    purpose = String(required=True, choices=CodePurpose)


@ordering.command(part_of="Account")
class WithdrawAccountCode:
    account_id = Identifier(required=True)
    purpose = String(required=True, choices=CodePurpose)
    code = String(required=True, max_length=10)


@ordering.command(part_of="Account")
class ConfirmAccountCode:
    account_id = Identifier(required=True)
    purpose = String(required=True, choices=CodePurpose)
    code = String(required=True, max_length=10)


@ordering.command_handler(part_of=Account)
class AccountCodeHandler:
    @handle(IssueAccountCode)
    def issue_account_code(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        code = account.issue_code(command.purpose)
        repo.add(account)
        return code

    @handle(WithdrawAccountCode)
    def withdraw_account_code(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.withdraw_code(command.purpose, command.code)
        repo.add(account)

    @handle(ConfirmAccountCode)
    def confirm_account_code(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.confirm_code(command.purpose, command.code)
        repo.add(account)


def request_account_code(account_id, purpose) -> None:
    """Issue a ``purpose`` code for the account and email it to the account holder."""
    code = current_domain.process(IssueAccountCode(account_id=str(account_id), purpose=purpose), asynchronous=False)
    account = current_domain.repository_for(Account).get(account_id)

    message = AccountCodeTemplate.render({"purpose": purpose, "code": code, "ttl_minutes": ACCOUNT_CODE_TTL_MINUTES})
    if not get_notifier().send(account.email, message["subject"], message["text"], message["html"]):
        logger.warning("Account code could not be delivered", account_id=str(account.id), purpose=purpose)
        current_domain.process(
            WithdrawAccountCode(account_id=str(account.id), purpose=purpose, code=code),
            asynchronous=False,
        )
        raise CodeDeliveryFailed(f"Could not deliver the {purpose.lower()} code, please try again")
