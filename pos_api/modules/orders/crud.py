"""
Order persistence helpers bound to one session.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import Order, OrderItem


class OrderRepository:

    def __init__(self, db: Session):
        self.db = db

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def get(self, order_id: UUID) -> Optional[Order]:
        return self.db.execute(
            select(Order)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.payment),
                selectinload(Order.customer),
                selectinload(Order.cashier),
                selectinload(Order.prepared_by),
                selectinload(Order.served_by)
            )
            .where(Order.id == order_id)
        ).scalar_one_or_none()

    def count_created_between(self, start: datetime, end: datetime) -> int:
        """Orders with ``start <= created_at < end``"""
        return self.db.execute(
            select(func.count(Order.id)).where(
                Order.created_at >= start,
                Order.created_at < end
            )
        ).scalar_one()
