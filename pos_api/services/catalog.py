import logging
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from pos_api.errors import InsufficientStockError, NotFoundError
from pos_api.models.product import Product

logger = logging.getLogger(__name__)


class CatalogStore:
    """Product lookups and stock changes used by the order engine."""

    def __init__(self, session: Session):
        self.session = session

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def require_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found", product_id=product_id)
        return product

    def decrement_stock(self, product_id: int, quantity: int, guard: bool = False):
        """
        Decrement stock in the database without committing.

        The subtraction happens in SQL so concurrent decrements never lose
        updates. With ``guard`` the row only changes while enough stock is left.
        """
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock - quantity)
        )
        if guard:
            statement = statement.where(Product.stock >= quantity)

        result = self.session.execute(statement)

        if result.rowcount != 1:
            product = self.get_product(product_id)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found", product_id=product_id)
            raise InsufficientStockError(
                f"Insufficient stock for product: {product.name}",
                product_id=product_id,
            )

        logger.info(f"Decremented stock of product {product_id} by {quantity}")
