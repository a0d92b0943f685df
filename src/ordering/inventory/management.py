"""Product administration — commands and handler.

These are the only ways to change stock outside checkout and cancellation.
``SetStock`` overwrites the level outright and is meant for physical stock
counts.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.inventory.product import Product

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    image_url = String(max_length=1024)


@ordering.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Product")
class SetStock:
    product_id = Identifier(required=True)
    stock = Integer(required=True, min_value=0)


@ordering.command(part_of="Product")
class RepriceProduct:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.quantity)
        repo.add(product)

    @handle(SetStock)
    def set_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        logger.warning(
            "Stock level overwritten",
            product_id=str(product.id),
            previous_stock=product.stock,
            new_stock=command.stock,
        )
        product.set_stock(command.stock)
        repo.add(product)

    @handle(RepriceProduct)
    def reprice_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.reprice(command.price)
        repo.add(product)
