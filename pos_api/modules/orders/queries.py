"""
Read side of the orders module: lookups, filtered listings and statistics.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from typing import Optional, Dict, Any, List, Tuple
from uuid import UUID

from sqlalchemy import func, select, or_
from sqlalchemy.orm import Session, selectinload

from pos_api.common.exceptions import NotFoundError, ValidationError, InvalidStatusError
from pos_api.common.money import ZERO, to_money, safe_divide
from pos_api.core.config import settings
from .crud import OrderRepository
from .models import Order, OrderItem, OrderStatus, PaymentStatus, OrderType, OrderPayment

logger = logging.getLogger(__name__)

PENDING_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING)


@dataclass
class OrderFilters:
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    order_type: Optional[OrderType] = None
    customer: Optional[UUID] = None
    cashier: Optional[UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def escape_like(value: str) -> str:
    """Make ``%`` and ``_`` match literally in a LIKE pattern"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def resolve_period(period: str, end_date: Optional[str] = None,
                   now: Optional[datetime] = None) -> Tuple[datetime, datetime, bool]:
    """
    Translate a named period into ``(start, end, is_today)``.

    Anything other than today/week/month/year is read as an ISO start date,
    with ``end_date`` (inclusive day) or now as the end.
    """
    now = now or datetime.now()
    if period == "today":
        return datetime.combine(now.date(), time.min), end_of_day(now.date()), True
    if period == "week":
        return now - timedelta(days=7), now, False
    if period == "month":
        return datetime(now.year, now.month, 1), now, False
    if period == "year":
        return datetime(now.year, 1, 1), now, False
    try:
        start = datetime.fromisoformat(period)
        end = end_of_day(date.fromisoformat(end_date[:10])) if end_date else now
    except ValueError:
        raise ValidationError(f"Invalid period: {period}")
    return start, end, False


class OrderQueryService:

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)

    def get_order(self, order_id: UUID) -> Order:
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_orders(self, filters: OrderFilters, page: int = 1,
                    limit: int = settings.DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        """Newest first, with ``{current, pages, total}`` pagination"""
        page = max(page, 1)
        limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)

        conditions = []
        if filters.status:
            conditions.append(Order.status == filters.status)
        if filters.payment_status:
            conditions.append(Order.payment_status == filters.payment_status)
        if filters.order_type:
            conditions.append(Order.order_type == filters.order_type)
        if filters.customer:
            conditions.append(Order.customer_id == filters.customer)
        if filters.cashier:
            conditions.append(Order.cashier_id == filters.cashier)
        if filters.start_date:
            conditions.append(Order.created_at >= filters.start_date)
        if filters.end_date:
            conditions.append(Order.created_at <= filters.end_date)
        if filters.search:
            term = f"%{escape_like(filters.search.lower())}%"
            conditions.append(or_(
                func.lower(Order.order_number).like(term, escape="\\"),
                func.lower(Order.customer_name).like(term, escape="\\"),
                func.lower(Order.customer_phone).like(term, escape="\\")
            ))

        total = self.db.execute(
            select(func.count(Order.id)).where(*conditions)
        ).scalar_one()

        orders = self.db.execute(
            select(Order)
            .options(
                selectinload(Order.items),
                selectinload(Order.payment),
                selectinload(Order.customer),
                selectinload(Order.cashier),
                selectinload(Order.prepared_by),
                selectinload(Order.served_by)
            )
            .where(*conditions)
            .order_by(Order.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        return {
            "orders": orders,
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit),
                "total": total
            }
        }

    def get_orders_by_status(self, status: str, page: int = 1,
                             limit: int = settings.DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        try:
            order_status = OrderStatus(status)
        except ValueError:
            raise InvalidStatusError("Invalid order status")
        return self.list_orders(OrderFilters(status=order_status), page, limit)

    def sales_stats(self, start: datetime, end: datetime) -> Dict[str, Any]:
        """Totals over completed, paid orders created in ``[start, end]``"""
        window = (
            Order.status == OrderStatus.COMPLETED,
            Order.payment_status == PaymentStatus.PAID,
            Order.created_at >= start,
            Order.created_at <= end,
        )
        total_sales, total_cost, total_orders = self.db.execute(
            select(
                func.coalesce(func.sum(Order.total_amount), 0),
                func.coalesce(func.sum(Order.total_cost), 0),
                func.count(Order.id)
            ).where(*window)
        ).one()
        total_items = self.db.execute(
            select(func.count(OrderItem.id))
            .join(Order, OrderItem.order_id == Order.id)
            .where(*window)
        ).scalar_one()

        total_sales = to_money(total_sales)
        total_cost = to_money(total_cost)
        return {
            "total_sales": total_sales,
            "total_cost": total_cost,
            "total_profit": total_sales - total_cost,
            "total_orders": total_orders,
            "total_items": total_items,
            "average_order_value": to_money(safe_divide(total_sales, total_orders))
        }

    def get_order_stats(self, period: str = "today", end_date: Optional[str] = None) -> Dict[str, Any]:
        start, end, is_today = resolve_period(period, end_date)
        in_window = (Order.created_at >= start, Order.created_at <= end)

        by_status = [
            {"status": row.status.value, "count": row.order_count, "total_amount": to_money(row.total)}
            for row in self.db.execute(
                select(
                    Order.status,
                    func.count(Order.id).label("order_count"),
                    func.coalesce(func.sum(Order.total_amount), 0).label("total")
                )
                .where(*in_window)
                .group_by(Order.status)
                .order_by(Order.status)
            )
        ]

        by_payment = [
            {"method": row.method.value, "count": row.order_count, "total_amount": to_money(row.total)}
            for row in self.db.execute(
                select(
                    OrderPayment.method,
                    func.count(Order.id).label("order_count"),
                    func.coalesce(func.sum(Order.total_amount), 0).label("total")
                )
                .join(OrderPayment, OrderPayment.order_id == Order.id)
                .where(*in_window, Order.payment_status == PaymentStatus.PAID)
                .group_by(OrderPayment.method)
                .order_by(OrderPayment.method)
            )
        ]

        return {
            "period": {"start": start, "end": end},
            "sales": self.sales_stats(start, end),
            "by_status": by_status,
            "by_payment": by_payment,
            "hourly": self.hourly_sales(start, end) if is_today else []
        }

    def hourly_sales(self, start: datetime, end: datetime,
                     completed_only: bool = False) -> List[Dict[str, Any]]:
        """Paid orders bucketed by hour of creation, hours without sales omitted"""
        buckets: Dict[int, Dict[str, Any]] = {}
        conditions = [
            Order.created_at >= start,
            Order.created_at <= end,
            Order.payment_status == PaymentStatus.PAID
        ]
        if completed_only:
            conditions.append(Order.status == OrderStatus.COMPLETED)
        rows = self.db.execute(select(Order.created_at, Order.total_amount).where(*conditions))
        for created_at, total_amount in rows:
            bucket = buckets.setdefault(created_at.hour, {"hour": created_at.hour, "sales": ZERO, "orders": 0})
            bucket["sales"] += to_money(total_amount)
            bucket["orders"] += 1
        return [buckets[hour] for hour in sorted(buckets)]

    def get_today_summary(self) -> Dict[str, Any]:
        start, end, _ = resolve_period("today")
        in_window = (Order.created_at >= start, Order.created_at <= end)
        completed = (Order.status == OrderStatus.COMPLETED, Order.payment_status == PaymentStatus.PAID)

        total_orders = self.db.execute(
            select(func.count(Order.id)).where(*in_window)
        ).scalar_one()
        pending_orders = self.db.execute(
            select(func.count(Order.id)).where(*in_window, Order.status.in_(PENDING_STATUSES))
        ).scalar_one()
        today_sales, completed_orders = self.db.execute(
            select(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
            .where(*in_window, *completed)
        ).one()

        return {
            "total_orders": total_orders,
            "completed_orders": completed_orders,
            "pending_orders": pending_orders,
            "today_sales": to_money(today_sales),
            "today_order_count": completed_orders
        }
