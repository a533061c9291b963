"""
Catalog store: product lookups and stock adjustments used by checkout and
the order lifecycle.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from .models import Product

logger = logging.getLogger(__name__)


class CatalogStore:
    """Product reads and stock deltas bound to one session"""

    def __init__(self, db: Session):
        self.db = db

    def find_product(self, product_id: UUID) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def decrement_stock(self, product_id: UUID, quantity: int) -> None:
        """
        Take ``quantity`` units out of stock, never going below zero.

        Done as one conditional UPDATE so concurrent checkouts cannot drive
        the stock negative.
        """
        self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=case(
                (Product.stock >= quantity, Product.stock - quantity),
                else_=0
            ))
            .execution_options(synchronize_session=False)
        )
        self._expire(product_id)
        logger.debug(f"Stock -{quantity} for product {product_id}")

    def restore_stock(self, product_id: UUID, quantity: int) -> None:
        self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        self._expire(product_id)
        logger.debug(f"Stock +{quantity} for product {product_id}")

    def _expire(self, product_id: UUID) -> None:
        product = self.db.identity_map.get(self.db.identity_key(Product, product_id))
        if product is not None:
            self.db.expire(product, ["stock"])
