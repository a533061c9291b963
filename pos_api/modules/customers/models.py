from pos_api.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, Enum, Uuid
from uuid import uuid4
from pos_api.common.mixins import TimestampMixin
import enum


class CustomerType(enum.Enum):
    REGULAR = "regular"
    VIP = "vip"
    WHOLESALE = "wholesale"


class Customer(Base, TimestampMixin):
    """
    Customer record.

    ``total_spent``, ``order_count`` and ``last_order_date`` are maintained
    by checkout; orders keep their own snapshot of name/phone/email.
    """
    __tablename__ = "customers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(100), nullable=True)
    phone = Column(String(30), nullable=False, unique=True)
    customer_type = Column(Enum(CustomerType, values_callable=lambda e: [m.value for m in e]),
                           nullable=False, default=CustomerType.REGULAR, index=True)
    loyalty_points = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(15, 2), nullable=False, default=0, index=True)
    order_count = Column(Integer, nullable=False, default=0)
    last_order_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def average_order_value(self):
        if not self.order_count:
            return 0
        return self.total_spent / self.order_count
