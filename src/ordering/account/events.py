"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Account")
class AccountRegistered:
    """A storefront account became known to the ordering engine."""

    __version__ = 1

    account_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Account")
class ShippingAddressSaved:
    """An account's shipping address was replaced."""

    __version__ = 1

    account_id = Identifier(required=True)
    city = String()
    postal_code = String()


@ordering.event(part_of="Account")
class AccountRemoved:
    """An account was removed by an administrator."""

    __version__ = 1

    account_id = Identifier(required=True)
    role = String(required=True)
    removed_at = DateTime(required=True)


@ordering.event(part_of="Account")
class AccountCodeConfirmed:
    """A one-time account code (email verification or password reset) was consumed."""

    __version__ = 1

    account_id = Identifier(required=True)
    purpose = String(required=True)
    confirmed_at = DateTime(required=True)
