"""
Checkout service for the orders module

Turns a cart plus a tendered payment into a persisted order:
- Validates the cart, payment, customer and every product (fail fast)
- Prices lines with caller-supplied prices and discounts
- Computes subtotal, tax, total and cost
- Persists the order, decrements tracked stock and updates the customer
  aggregates inside one unit of work
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Dict, Any
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.common.exceptions import (
    ValidationError, NotFoundError, InvalidStateError, InsufficientStockError,
    PaymentInsufficientError, ConflictError, InternalError
)
from pos_api.common.money import ZERO, CurrencyFormatter, percent_of, to_money
from pos_api.common.unit_of_work import SqlAlchemyUnitOfWork
from pos_api.modules.products.models import Product
from .models import (
    Order, OrderItem, OrderPayment, OrderStatus, PaymentStatus,
    PaymentRecordStatus, OrderType
)
from .numbering import OrderNumberGenerator
from .schemas import OrderCreate, OrderItemCreate, OrderOut

logger = logging.getLogger(__name__)

WALK_IN_CUSTOMER = "Walk-in Customer"


@dataclass
class PricedLine:
    product: Product
    quantity: int
    price: Decimal
    discount: Decimal

    @property
    def total(self) -> Decimal:
        return to_money(self.price * self.quantity - self.discount)

    @property
    def cost(self) -> Decimal:
        return to_money(self.product.cost or ZERO)

    @property
    def total_cost(self) -> Decimal:
        return to_money(self.cost * self.quantity)


@dataclass
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    total_cost: Decimal


def compute_totals(lines: List[PricedLine], tax_rate: Decimal, is_taxable: bool,
                   tax_amount: Decimal = ZERO, discount_amount: Decimal = ZERO,
                   shipping_amount: Decimal = ZERO) -> OrderTotals:
    """
    Price a cart.

    ``tax_amount`` overrides the computed tax when it is non-zero; zero means
    the caller did not supply one.
    """
    subtotal = to_money(sum((line.total for line in lines), ZERO))
    total_cost = to_money(sum((line.total_cost for line in lines), ZERO))
    calculated_tax = to_money(percent_of(subtotal, tax_rate)) if is_taxable else ZERO
    tax = to_money(tax_amount) if tax_amount else calculated_tax
    discount = to_money(discount_amount)
    shipping = to_money(shipping_amount)
    return OrderTotals(
        subtotal=subtotal,
        tax_amount=tax,
        discount_amount=discount,
        shipping_amount=shipping,
        total_amount=subtotal + tax + shipping - discount,
        total_cost=total_cost
    )


def serialize_order(order: Order, formatter: Optional[CurrencyFormatter] = None) -> Dict[str, Any]:
    """Order as a JSON-ready dict with staff names and the formatted total"""
    data = OrderOut.model_validate(order)
    if formatter is not None:
        data.formatted_total = formatter.format(order.total_amount)
    return data.model_dump()


class CheckoutService:
    """Creates orders atomically"""

    def __init__(self, db: Session):
        self.db = db
        self.numbers = OrderNumberGenerator(db)

    def create_order(self, order_data: OrderCreate, cashier_id: UUID) -> Order:
        """Validate, price and persist an order with its stock and customer side effects"""
        try:
            with SqlAlchemyUnitOfWork(self.db) as uow:
                if not order_data.items:
                    raise ValidationError("Order must contain at least one item")

                payment = order_data.payment
                if not payment.method or not payment.amount:
                    raise ValidationError("Payment method and amount are required")

                customer = None
                if order_data.customer:
                    customer = uow.customers.find_customer(order_data.customer)
                    if not customer:
                        raise NotFoundError("Customer not found")

                lines = [self._price_line(uow, item) for item in order_data.items]

                tax_rate = order_data.tax_rate
                if tax_rate is None:
                    tax_rate = uow.settings.default_tax_rate()

                totals = compute_totals(
                    lines,
                    tax_rate=tax_rate,
                    is_taxable=order_data.is_taxable,
                    tax_amount=order_data.tax_amount,
                    discount_amount=order_data.discount_amount,
                    shipping_amount=order_data.shipping_amount
                )

                for line in lines:
                    if line.total < ZERO:
                        raise ValidationError(f"Discount exceeds line amount for: {line.product.name}")
                if totals.total_amount < ZERO:
                    raise ValidationError("Order total cannot be negative")

                if payment.amount < totals.total_amount:
                    raise PaymentInsufficientError(payment.amount, totals.total_amount)

                now = datetime.now()
                order_number = self.numbers.generate(now)

                if order_data.order_type == OrderType.WALK_IN:
                    order_status = OrderStatus.COMPLETED
                else:
                    order_status = OrderStatus.CONFIRMED

                order = Order(
                    order_number=order_number,
                    customer_id=customer.id if customer else None,
                    customer_name=order_data.customer_name or (customer.name if customer else WALK_IN_CUSTOMER),
                    customer_phone=order_data.customer_phone or (customer.phone if customer else ""),
                    customer_email=order_data.customer_email or ((customer.email or "") if customer else ""),
                    subtotal=totals.subtotal,
                    tax_amount=totals.tax_amount,
                    discount_amount=totals.discount_amount,
                    shipping_amount=totals.shipping_amount,
                    total_amount=totals.total_amount,
                    total_cost=totals.total_cost,
                    tax_rate=tax_rate,
                    is_taxable=order_data.is_taxable,
                    status=order_status,
                    payment_status=PaymentStatus.PAID,
                    notes=order_data.notes,
                    order_type=order_data.order_type,
                    table_number=order_data.table_number,
                    delivery_address=(
                        order_data.delivery_address.model_dump(exclude_none=True)
                        if order_data.delivery_address else None
                    ),
                    branch=order_data.branch,
                    cashier_id=cashier_id,
                    created_at=now,
                    updated_at=now
                )
                order.items = [
                    OrderItem(
                        position=position,
                        product_id=line.product.id,
                        name=line.product.name,
                        sku=line.product.sku,
                        price=to_money(line.price),
                        cost=line.cost,
                        quantity=line.quantity,
                        discount=to_money(line.discount),
                        total=line.total
                    )
                    for position, line in enumerate(lines)
                ]
                order.payment = OrderPayment(
                    method=payment.method,
                    amount=to_money(payment.amount),
                    transaction_id=payment.transaction_id,
                    status=PaymentRecordStatus.COMPLETED,
                    paid_at=now
                )
                uow.orders.add(order)

                for line in lines:
                    if line.product.track_inventory:
                        uow.products.decrement_stock(line.product.id, line.quantity)

                if customer:
                    uow.customers.record_order(customer.id, totals.total_amount, now)

                uow.commit()
                order_id = order.id

            logger.info(f"Order {order_number} created: total={totals.total_amount}, cashier={cashier_id}")
            return uow.orders.get(order_id)

        except HTTPException:
            raise
        except IntegrityError as e:
            logger.warning(f"Integrity error creating order: {e}")
            raise ConflictError("Order could not be saved because of a duplicate value, please retry")
        except Exception as e:
            logger.error(f"Error creating order: {e}")
            raise InternalError(f"Error creating order: {str(e)}")

    @staticmethod
    def _price_line(uow: SqlAlchemyUnitOfWork, item: OrderItemCreate) -> PricedLine:
        product = uow.products.find_product(item.product)
        if not product:
            raise NotFoundError(f"Product not found: {item.product}")
        if not product.is_active:
            raise InvalidStateError(f"Product is not active: {product.name}")
        if product.track_inventory and product.stock < item.quantity:
            raise InsufficientStockError(product.name, product.stock)
        return PricedLine(
            product=product,
            quantity=item.quantity,
            price=item.price,
            discount=item.discount
        )
