"""Product aggregate — the sellable item and its stock level.

``stock`` and ``sale_count`` move only through ``reserve`` and ``release``
(driven by the ledger at checkout and cancellation) and through the explicit
administrative adjustments. Every persisted change bumps the aggregate
version, and a write from a stale copy is rejected by the repository, which is
what makes the check-then-decrement in ``reserve`` a conditional write.
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from ordering.domain import ordering
from ordering.inventory.events import (
    ProductRegistered,
    ProductRepriced,
    StockAdjusted,
    StockReleased,
    StockReserved,
)
from ordering.shared.errors import InsufficientStock
from ordering.utils import clock


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    image_url = String(max_length=1024)
    stock = Integer(default=0, min_value=0)
    sale_count = Integer(default=0, min_value=0)
    registered_at = DateTime()

    @classmethod
    def register(cls, name, price, stock=0, image_url=None):
        now = clock.utc_now()
        product = cls(
            name=name,
            price=price,
            image_url=image_url,
            stock=stock,
            sale_count=0,
            registered_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=name,
                price=price,
                stock=stock,
                registered_at=now,
            )
        )
        return product

    def can_supply(self, quantity) -> bool:
        return self.stock >= quantity

    # -------------------------------------------------------------------
    # Ledger operations
    # -------------------------------------------------------------------
    def reserve(self, quantity):
        """Take ``quantity`` units for one order line."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.can_supply(quantity):
            raise InsufficientStock(self.id, requested=quantity, available=self.stock)

        previous = self.stock
        self.stock = previous - quantity
        self.sale_count = (self.sale_count or 0) + 1
        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
            )
        )

    def release(self, quantity):
        """Give back ``quantity`` units from a cancelled order line."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock
        self.stock = previous + quantity
        self.sale_count = max((self.sale_count or 0) - 1, 0)
        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
            )
        )

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self._adjust(self.stock + quantity, reason="Restock")

    def set_stock(self, stock):
        """Overwrite the stock level. Bypasses the ledger; use only for stock counts."""
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})
        self._adjust(stock, reason="Stock count")

    def reprice(self, price):
        if price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})
        previous = self.price
        self.price = price
        self.raise_(ProductRepriced(product_id=str(self.id), previous_price=previous, new_price=price))

    def _adjust(self, new_stock, reason):
        previous = self.stock
        self.stock = new_stock
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
            )
        )
