"""
Order lifecycle: status transitions and refunds.

    pending -> confirmed -> processing -> ready -> completed
    any status -> cancelled
    paid order -> refunded (refund operation only)

Cancelling a paid order gives its tracked stock back and marks the payment
refunded. Completing a cancelled order takes the stock out again without
re-checking availability; the catalog store clamps the result at zero.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.common.exceptions import (
    InvalidStatusError, NotFoundError, InvalidStateError, RefundExceedsTotalError,
    ConflictError, InternalError
)
from pos_api.common.money import to_money
from pos_api.common.unit_of_work import SqlAlchemyUnitOfWork
from pos_api.modules.auth.models import User
from .models import Order, OrderStatus, PaymentStatus, PaymentRecordStatus

logger = logging.getLogger(__name__)

UPDATABLE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
)


def parse_updatable_status(value: str) -> OrderStatus:
    for candidate in UPDATABLE_STATUSES:
        if candidate.value == value:
            return candidate
    raise InvalidStatusError("Invalid order status")


class OrderLifecycleService:

    def __init__(self, db: Session):
        self.db = db

    def update_status(self, order_id: UUID, new_status: str,
                      prepared_by: Optional[UUID] = None,
                      served_by: Optional[UUID] = None) -> Order:
        try:
            with SqlAlchemyUnitOfWork(self.db) as uow:
                order = self._get_order(uow, order_id)
                target = parse_updatable_status(new_status)
                previous = order.status

                if target == OrderStatus.CANCELLED and order.payment_status == PaymentStatus.PAID:
                    for product_id, quantity in order.items_to_restock():
                        uow.products.restore_stock(product_id, quantity)
                    order.payment_status = PaymentStatus.REFUNDED
                    if order.payment is not None:
                        order.payment.status = PaymentRecordStatus.REFUNDED

                if target == OrderStatus.COMPLETED and previous == OrderStatus.CANCELLED:
                    for product_id, quantity in order.items_to_restock():
                        uow.products.decrement_stock(product_id, quantity)
                    order.payment_status = PaymentStatus.PAID
                    if order.payment is not None:
                        order.payment.status = PaymentRecordStatus.COMPLETED

                order.status = target
                if prepared_by:
                    order.prepared_by_id = self._get_user(uow, prepared_by).id
                if served_by:
                    order.served_by_id = self._get_user(uow, served_by).id

                uow.commit()

            logger.info(f"Order {order.order_number}: {previous.value} -> {target.value}")
            return uow.orders.get(order_id)

        except HTTPException:
            raise
        except IntegrityError as e:
            logger.warning(f"Integrity error updating order {order_id}: {e}")
            raise ConflictError()
        except Exception as e:
            logger.error(f"Error updating order status: {e}")
            raise InternalError(f"Error updating order status: {str(e)}")

    def process_refund(self, order_id: UUID, refund_amount: Optional[Decimal] = None,
                       reason: Optional[str] = None) -> Order:
        """
        Refund a paid order.

        The amount defaults to the order total. Stock for every tracked line is
        restored whatever the amount; a partial refund leaves the order
        ``partially_paid``.
        """
        try:
            with SqlAlchemyUnitOfWork(self.db) as uow:
                order = self._get_order(uow, order_id)

                if order.payment_status != PaymentStatus.PAID:
                    raise InvalidStateError("Order is not paid, cannot process refund")

                total = to_money(order.total_amount)
                amount = to_money(refund_amount) if refund_amount else total
                if amount > total:
                    raise RefundExceedsTotalError()

                for product_id, quantity in order.items_to_restock():
                    uow.products.restore_stock(product_id, quantity)

                order.status = OrderStatus.REFUNDED
                order.payment_status = PaymentStatus.PARTIALLY_PAID if amount < total else PaymentStatus.REFUNDED
                if order.payment is not None:
                    order.payment.status = PaymentRecordStatus.REFUNDED

                note = f"Refund: {reason} ({amount})"
                order.notes = f"{order.notes}\n{note}" if order.notes else note

                uow.commit()

            logger.info(f"Order {order.order_number} refunded: amount={amount}")
            return uow.orders.get(order_id)

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error processing refund: {e}")
            raise InternalError(f"Error processing refund: {str(e)}")

    @staticmethod
    def _get_order(uow: SqlAlchemyUnitOfWork, order_id: UUID) -> Order:
        order = uow.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def _get_user(uow: SqlAlchemyUnitOfWork, user_id: UUID) -> User:
        user = uow.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
