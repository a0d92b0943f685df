"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductRegistered:
    """A product was added to the sellable catalogue with an opening stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockReserved:
    """Stock was taken for an order line."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@ordering.event(part_of="Product")
class StockReleased:
    """Stock was returned by a cancelled order line."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@ordering.event(part_of="Product")
class StockAdjusted:
    """An administrator restocked or overwrote the stock level."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(required=True)


@ordering.event(part_of="Product")
class ProductRepriced:
    """The product's current price changed. Existing orders keep their snapshot."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
