"""
Customer store: lookups and the purchase aggregates maintained by checkout.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from .models import Customer


class CustomerStore:

    def __init__(self, db: Session):
        self.db = db

    def find_customer(self, customer_id: UUID) -> Optional[Customer]:
        return self.db.get(Customer, customer_id)

    def record_order(self, customer_id: UUID, amount: Decimal, ordered_at: datetime) -> None:
        """Add one order worth ``amount`` to the customer's history"""
        self.db.execute(
            update(Customer)
            .where(Customer.id == customer_id)
            .values(
                order_count=Customer.order_count + 1,
                total_spent=Customer.total_spent + amount,
                last_order_date=ordered_at
            )
            .execution_options(synchronize_session=False)
        )
        customer = self.db.identity_map.get(self.db.identity_key(Customer, customer_id))
        if customer is not None:
            self.db.expire(customer, ["order_count", "total_spent", "last_order_date"])
