"""Account aggregate — the slice of a storefront user the ordering engine reads.

Registration, authentication and password storage live outside this engine.
Orders only need an account's email, shipping address, role and status, plus
the per-purpose one-time codes used for email verification and password reset.
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, ValueObject

from ordering.account.events import AccountCodeConfirmed, AccountRegistered, AccountRemoved, ShippingAddressSaved
from ordering.domain import ordering
from ordering.shared import otp
from ordering.shared.address import ShippingAddress
from ordering.shared.errors import InvalidOrExpiredCode
from ordering.shared.policy import ACCOUNT_CODE_TTL_MINUTES
from ordering.utils import clock


class AccountRole(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    DELIVERY_AGENT = "Delivery Agent"


class AccountStatus(Enum):
    ACTIVE = "Active"
    REMOVED = "Removed"


class CodePurpose(Enum):
    EMAIL_VERIFICATION = "Email Verification"
    PASSWORD_RESET = "Password Reset"


# Each purpose keeps its own code and expiry, so a code issued for one purpose
# never satisfies another.
_CODE_FIELDS = {
    CodePurpose.EMAIL_VERIFICATION: ("email_verification_code", "email_verification_expires_at"),
    CodePurpose.PASSWORD_RESET: ("password_reset_code", "password_reset_expires_at"),
}


@ordering.aggregate
class Account:
    email = String(required=True, max_length=254)
    name = String(max_length=100)
    role = String(choices=AccountRole, default=AccountRole.CUSTOMER.value)
    status = String(choices=AccountStatus, default=AccountStatus.ACTIVE.value)
    shipping_address = ValueObject(ShippingAddress)
    email_verified = Boolean(default=False)
    email_verification_code = String(max_length=10)
    email_verification_expires_at = DateTime()
    password_reset_code = String(max_length=10)
    password_reset_expires_at = DateTime()
    registered_at = DateTime()
    removed_at = DateTime()

    @classmethod
    def register(cls, email, name=None, role=AccountRole.CUSTOMER.value):
        now = clock.utc_now()
        account = cls(
            email=email.strip().lower(),
            name=name,
            role=role,
            registered_at=now,
        )
        account.raise_(
            AccountRegistered(
                account_id=str(account.id),
                email=account.email,
                role=account.role,
                registered_at=now,
            )
        )
        return account

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value

    @property
    def is_delivery_agent(self) -> bool:
        return self.is_active and self.role == AccountRole.DELIVERY_AGENT.value

    def has_complete_address(self) -> bool:
        return self.shipping_address is not None and self.shipping_address.is_complete()

    def save_shipping_address(self, name, phone, postal_code, city, landmark=None):
        self._assert_active()
        self.shipping_address = ShippingAddress(
            name=name,
            phone=phone,
            postal_code=postal_code,
            city=city,
            landmark=landmark,
        )
        self.raise_(ShippingAddressSaved(account_id=str(self.id), city=city, postal_code=postal_code))

    def remove(self):
        self._assert_active()
        now = clock.utc_now()
        self.status = AccountStatus.REMOVED.value
        self.removed_at = now
        self.raise_(
            AccountRemoved(
                account_id=str(self.id),
                role=self.role,
                removed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # One-time codes
    # -------------------------------------------------------------------
    def issue_code(self, purpose, now=None):
        """Store a fresh code for ``purpose`` and return it for delivery.

        Issuing again replaces the previous code, which stops working.
        """
        purpose = CodePurpose(purpose)
        self._assert_active()
        if purpose == CodePurpose.EMAIL_VERIFICATION and self.email_verified:
            raise ValidationError({"email": ["Email address is already verified"]})

        code_field, expiry_field = _CODE_FIELDS[purpose]
        code = otp.generate_code()
        setattr(self, code_field, code)
        setattr(self, expiry_field, otp.expiry_at(ACCOUNT_CODE_TTL_MINUTES, now=now))
        return code

    def withdraw_code(self, purpose, code):
        """Forget ``code`` if it is still the live one for ``purpose``. A newer code is kept."""
        code_field, expiry_field = _CODE_FIELDS[CodePurpose(purpose)]
        if getattr(self, code_field) == code:
            setattr(self, code_field, None)
            setattr(self, expiry_field, None)

    def confirm_code(self, purpose, code, now=None):
        """Consume the code for ``purpose``.

        A wrong or expired code leaves the stored code untouched.
        """
        purpose = CodePurpose(purpose)
        code_field, expiry_field = _CODE_FIELDS[purpose]
        expires_at = clock.as_utc(getattr(self, expiry_field))
        now = now or clock.utc_now()

        if not otp.code_matches(getattr(self, code_field), code) or expires_at is None or now >= expires_at:
            raise InvalidOrExpiredCode()

        setattr(self, code_field, None)
        setattr(self, expiry_field, None)
        if purpose == CodePurpose.EMAIL_VERIFICATION:
            self.email_verified = True

        self.raise_(
            AccountCodeConfirmed(
                account_id=str(self.id),
                purpose=purpose.value,
                confirmed_at=now,
            )
        )

    def _assert_active(self):
        if not self.is_active:
            raise ValidationError({"status": ["Account has been removed"]})
