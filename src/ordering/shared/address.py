"""ShippingAddress value object, shared by accounts and order snapshots."""

from protean.fields import String

from ordering.domain import ordering


@ordering.value_object
class ShippingAddress:
    """Where a cash-on-delivery order is taken to.

    An Account holds the customer's current address; an Order holds a copy taken
    at checkout, which never changes even if the customer later edits theirs.
    """

    name = String(max_length=100)
    phone = String(max_length=20)
    postal_code = String(max_length=12)
    city = String(max_length=100)
    landmark = String(max_length=255)

    def is_complete(self) -> bool:
        return all([self.name, self.phone, self.postal_code, self.city])
