"""Shopping Cart aggregate (CQRS) — the persisted cart a customer checks out.

There is one cart per customer and its identity is the customer's id. The
cart is the only input checkout trusts: any copy of the cart the caller holds
for display is ignored when placing an order.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from ordering.domain import ordering
from ordering.shared.errors import InsufficientStock
from ordering.utils import clock


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        return cls(id=str(customer_id), customer_id=str(customer_id), updated_at=clock.utc_now())

    @property
    def is_empty(self) -> bool:
        return not self.items

    def lines(self) -> list[tuple[str, int]]:
        """The cart as ``(product_id, quantity)`` pairs."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    def _find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, available):
        """Add ``quantity`` units of a product, or top up an existing line.

        ``available`` is the product's stock right now; the line may not exceed it.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self._find(product_id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > available:
            raise InsufficientStock(product_id, requested=new_quantity, available=available)

        now = clock.utc_now()
        if existing:
            existing.quantity = new_quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=new_quantity,
            )
        )

    def update_item_quantity(self, product_id, new_quantity, available):
        """Set a line's quantity. Zero removes the line."""
        if new_quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self._find(product_id)
        if item is None:
            if new_quantity == 0:
                return
            raise ValidationError({"product_id": ["Item not found in cart"]})

        if new_quantity == 0:
            self.remove_item(product_id)
            return

        if new_quantity > available:
            raise InsufficientStock(product_id, requested=new_quantity, available=available)

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = clock.utc_now()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        item = self._find(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = clock.utc_now()

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        """Empty the cart once its contents have become an order."""
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = clock.utc_now()

        self.raise_(CartCleared(cart_id=str(self.id)))


def cart_for(customer_id) -> ShoppingCart:
    """Load the customer's cart, or start an empty one if they have none yet."""
    try:
        return current_domain.repository_for(ShoppingCart).get(str(customer_id))
    except ObjectNotFoundError:
        return ShoppingCart.create(customer_id)
