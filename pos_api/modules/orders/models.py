"""
SQLAlchemy models for the orders module

- Order: checkout aggregate with totals, lifecycle status and staff
- OrderItem: snapshot of a product at the moment of sale
- OrderPayment: the payment captured at checkout (one per order)

Order lines and customer fields are denormalized copies; later edits to
products or customers never change historical orders.
"""

from pos_api.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, Enum, Text, JSON, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from decimal import Decimal
from pos_api.common.mixins import TimestampMixin
from pos_api.common.money import profit_margin
import enum


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ===== ENUMS =====

class OrderStatus(str, enum.Enum):
    """Fulfillment state of an order"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, enum.Enum):
    """Financial state of an order"""
    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentRecordStatus(str, enum.Enum):
    """State of the payment record itself"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"
    CREDIT = "credit"


class OrderType(str, enum.Enum):
    WALK_IN = "walk-in"
    DELIVERY = "delivery"
    PICKUP = "pickup"


# ===== MODELS =====

class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    order_number = Column(String(30), nullable=False, unique=True, index=True)

    # Customer snapshot
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(100), nullable=True)
    customer_phone = Column(String(30), nullable=True)
    customer_email = Column(String(100), nullable=True)

    # Totals
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_cost = Column(Numeric(15, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    is_taxable = Column(Boolean, nullable=False, default=True)

    status = Column(Enum(OrderStatus, values_callable=_enum_values),
                    nullable=False, default=OrderStatus.PENDING, index=True)
    payment_status = Column(Enum(PaymentStatus, values_callable=_enum_values),
                            nullable=False, default=PaymentStatus.PENDING, index=True)

    notes = Column(Text, nullable=True)
    order_type = Column(Enum(OrderType, values_callable=_enum_values),
                        nullable=False, default=OrderType.WALK_IN)
    table_number = Column(String(20), nullable=True)
    delivery_address = Column(JSON, nullable=True)
    branch = Column(String(50), nullable=True)

    # Staff
    cashier_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    prepared_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    served_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.position")
    payment = relationship("OrderPayment", back_populates="order", uselist=False,
                           cascade="all, delete-orphan")
    customer = relationship("Customer")
    cashier = relationship("User", foreign_keys=[cashier_id])
    prepared_by = relationship("User", foreign_keys=[prepared_by_id])
    served_by = relationship("User", foreign_keys=[served_by_id])

    @property
    def profit(self) -> Decimal:
        return (self.total_amount or 0) - (self.total_cost or 0)

    @property
    def profit_margin(self) -> Decimal:
        return profit_margin(self.total_amount, self.total_cost)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def customer_display_name(self) -> str:
        if self.customer is not None:
            return self.customer.name
        return self.customer_name or "Walk-in Customer"

    @property
    def cashier_name(self):
        return self.cashier.name if self.cashier else None

    @property
    def prepared_by_name(self):
        return self.prepared_by.name if self.prepared_by else None

    @property
    def served_by_name(self):
        return self.served_by.name if self.served_by else None

    def items_to_restock(self):
        """Yield (product_id, quantity) for lines whose product tracks inventory"""
        for item in self.items:
            if item.product is not None and item.product.track_inventory:
                yield item.product_id, item.quantity


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    # Product snapshot
    name = Column(String(100), nullable=False)
    sku = Column(String(50), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    cost = Column(Numeric(15, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


class OrderPayment(Base):
    __tablename__ = "order_payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, unique=True)
    method = Column(Enum(PaymentMethod, values_callable=_enum_values), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    transaction_id = Column(String(100), nullable=True)
    status = Column(Enum(PaymentRecordStatus, values_callable=_enum_values),
                    nullable=False, default=PaymentRecordStatus.PENDING)
    paid_at = Column(DateTime, nullable=True)

    order = relationship("Order", back_populates="payment")
