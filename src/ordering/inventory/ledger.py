"""Inventory ledger — conditional stock reservation against Product.

``reserve`` reads a product, checks the stock and writes the decrement back.
The repository only accepts that write if nobody else has written the product
since it was read (aggregate version check, ``ExpectedVersionError``), so two
checkouts racing for the last unit cannot both succeed. The loser re-reads and
tries again against the new stock.

``reserve_all`` is what checkout uses: it validates every line before touching
any product and performs its writes inside the caller's unit of work, so a
failure part-way leaves no line reserved.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from ordering.inventory.product import Product
from ordering.shared.errors import InsufficientStock
from ordering.shared.policy import RESERVATION_ATTEMPTS

logger = structlog.get_logger(__name__)


def reserve(product_id, quantity, attempts: int = RESERVATION_ATTEMPTS) -> bool:
    """Take ``quantity`` units of one product.

    A write that loses a race with another writer is retried on a fresh read,
    up to ``attempts`` times, so ample stock is not refused just because the
    product was busy. Returns False, with nothing written, when the stock is
    too low or when every attempt lost its race.
    """
    repo = current_domain.repository_for(Product)
    for attempt in range(1, attempts + 1):
        product = repo.get(product_id)
        try:
            product.reserve(quantity)
            repo.add(product)
        except InsufficientStock:
            logger.info("Reservation refused, insufficient stock", product_id=str(product_id), quantity=quantity)
            return False
        except ExpectedVersionError:
            logger.info("Reservation lost a race", product_id=str(product_id), attempt=attempt)
            continue
        return True

    logger.warning("Reservation refused, product kept changing", product_id=str(product_id), attempts=attempts)
    return False


def release(product_id, quantity) -> None:
    """Return ``quantity`` units of one product. Always succeeds for an existing product."""
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.release(quantity)
    repo.add(product)


def reserve_all(lines) -> dict:
    """Reserve every ``(product_id, quantity)`` line, or none of them.

    Must run inside a unit of work (a command handler). Raises
    ``ObjectNotFoundError`` for an unknown product and ``InsufficientStock``
    for the first short line, both before anything is written.

    Returns the reserved products keyed by id, as read for this reservation.
    """
    repo = current_domain.repository_for(Product)

    wanted: dict[str, int] = {}
    for product_id, quantity in lines:
        wanted[str(product_id)] = wanted.get(str(product_id), 0) + quantity

    products = {product_id: repo.get(product_id) for product_id in wanted}

    for product_id, quantity in wanted.items():
        product = products[product_id]
        if not product.can_supply(quantity):
            raise InsufficientStock(product_id, requested=quantity, available=product.stock)

    for product_id, quantity in wanted.items():
        product = products[product_id]
        product.reserve(quantity)
        repo.add(product)

    logger.info("Stock reserved", lines=len(wanted), units=sum(wanted.values()))
    return products


def release_all(lines) -> None:
    """Release every ``(product_id, quantity)`` line."""
    for product_id, quantity in lines:
        release(product_id, quantity)
