"""
Transactional boundary for multi-table writes.

Checkout and the order lifecycle run inside a unit of work: every store it
exposes shares one session, ``commit()`` makes all changes visible at once and
leaving the block with an exception rolls all of them back.

    with SqlAlchemyUnitOfWork(db) as uow:
        uow.orders.add(order)
        uow.products.decrement_stock(product_id, 2)
        uow.commit()
"""

import logging

from sqlalchemy.orm import Session

from pos_api.modules.customers.crud import CustomerStore
from pos_api.modules.orders.crud import OrderRepository
from pos_api.modules.products.crud import CatalogStore
from pos_api.modules.store_settings.crud import SettingsStore

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:

    def __init__(self, db: Session):
        self.db = db
        self.products = CatalogStore(db)
        self.customers = CustomerStore(db)
        self.orders = OrderRepository(db)
        self.settings = SettingsStore(db)
        self._committed = False

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            logger.warning(f"Transaction rolled back: {exc_type.__name__}: {exc}")
        elif not self._committed:
            self.rollback()

    def commit(self) -> None:
        self.db.commit()
        self._committed = True

    def rollback(self) -> None:
        self.db.rollback()
