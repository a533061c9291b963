"""
Base service class for Reports module

Every report reads persisted data only. Revenue figures count orders that
are both completed and paid and were created inside the report window.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from pos_api.common.money import ZERO, profit_margin, to_money
from pos_api.modules.orders.models import Order, OrderItem, OrderStatus, PaymentStatus
from ..schemas import ReportWindow, SalesGrouping


def window_from_dates(start_date: Optional[date], end_date: Optional[date],
                      group_by: SalesGrouping = SalesGrouping.DAY) -> ReportWindow:
    """
    Window from calendar dates, end day inclusive.

    Without dates the window runs from January 1st of this year to today.
    """
    today = date.today()
    start_date = start_date or date(today.year, 1, 1)
    end_date = end_date or today
    return ReportWindow(
        start=datetime.combine(start_date, time.min),
        end=datetime.combine(end_date, time.max),
        group_by=group_by
    )


def line_cost(item_cost: Any, quantity: Any):
    return to_money(item_cost) * int(quantity or 0)


def revenue_metrics(total_sales: Any, total_cost: Any) -> Dict[str, Decimal]:
    """total_sales / total_cost / total_profit / profit_margin for one row"""
    sales = to_money(total_sales)
    cost = to_money(total_cost)
    return {
        "total_sales": sales,
        "total_cost": cost,
        "total_profit": sales - cost,
        "profit_margin": profit_margin(sales, cost),
    }


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _revenue_filter(window: ReportWindow):
        """Completed, paid orders created in the window"""
        return and_(
            Order.status == OrderStatus.COMPLETED,
            Order.payment_status == PaymentStatus.PAID,
            Order.created_at >= window.start,
            Order.created_at <= window.end
        )

    def _get_revenue_order_query(self, window: ReportWindow):
        return self.db.query(Order).filter(self._revenue_filter(window))

    def _get_revenue_line_query(self, window: ReportWindow, *columns):
        """Order lines of revenue orders, selecting ``columns``"""
        return self.db.query(*columns).select_from(OrderItem).join(
            Order, OrderItem.order_id == Order.id
        ).filter(self._revenue_filter(window))

    @staticmethod
    def _empty_metrics() -> Dict[str, Decimal]:
        return revenue_metrics(ZERO, ZERO)
