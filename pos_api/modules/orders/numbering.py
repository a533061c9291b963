"""
Order number generation.

Numbers are ``ORD-YYYYMMDD-NNNN`` where ``NNNN`` is one more than the number
of orders already created that calendar day. The count runs on the checkout
session so it sees the same snapshot as the insert. If counting fails for
any reason an emergency number ``ORD-EMG-<8 digits><3 digits>`` is returned
so checkout never blocks on numbering.
"""

import logging
import random
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from .crud import OrderRepository

logger = logging.getLogger(__name__)

ORDER_PREFIX = "ORD"
EMERGENCY_PREFIX = "ORD-EMG-"


def day_bounds(moment: datetime):
    """Return ``[start_of_day, start_of_next_day)`` for ``moment``"""
    start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def format_order_number(moment: datetime, sequence: int) -> str:
    return f"{ORDER_PREFIX}-{moment:%Y%m%d}-{sequence:04d}"


def emergency_order_number() -> str:
    timestamp = str(int(time.time() * 1000))[-8:]
    suffix = f"{random.randint(0, 999):03d}"
    return f"{EMERGENCY_PREFIX}{timestamp}{suffix}"


class OrderNumberGenerator:

    def __init__(self, db: Session):
        self.orders = OrderRepository(db)

    def daily_count(self, moment: datetime) -> int:
        """
        Orders created on ``moment``'s day.

        Runs inside a savepoint: a failed count rolls back only the savepoint,
        leaving the checkout transaction usable for the emergency number.
        """
        start, end = day_bounds(moment)
        with self.orders.db.begin_nested():
            return self.orders.count_created_between(start, end)

    def generate(self, moment: Optional[datetime] = None) -> str:
        moment = moment or datetime.now()
        try:
            return format_order_number(moment, self.daily_count(moment) + 1)
        except Exception as e:
            number = emergency_order_number()
            logger.error(f"Error generating order number, using {number}: {e}")
            return number
