"""
Sales Reports Service

Sales over time (day, ISO week, month, year) and sales by product or
category, built from the lines of completed, paid orders.
"""

from datetime import datetime
from typing import Callable, Dict, List

from sqlalchemy import desc, func

from pos_api.common.money import ZERO, to_money
from pos_api.modules.categories.models import Category
from pos_api.modules.orders.models import Order, OrderItem
from pos_api.modules.products.models import Product
from ..schemas import ReportWindow, SalesGrouping
from .base import BaseReportService, line_cost, revenue_metrics
from .performance import ProductPerformanceReportService


def _iso_week_key(moment: datetime) -> str:
    year, week, _ = moment.isocalendar()
    return f"{year:04d}-W{week:02d}"


TIME_BUCKETS: Dict[SalesGrouping, Callable[[datetime], str]] = {
    SalesGrouping.DAY: lambda moment: moment.strftime("%Y-%m-%d"),
    SalesGrouping.WEEK: _iso_week_key,
    SalesGrouping.MONTH: lambda moment: moment.strftime("%Y-%m"),
    SalesGrouping.YEAR: lambda moment: moment.strftime("%Y"),
}


class SalesReportService(BaseReportService):
    """Service for generating sales reports"""

    def generate(self, window: ReportWindow) -> List[Dict]:
        if window.group_by == SalesGrouping.PRODUCT:
            return ProductPerformanceReportService(self.db).generate(window)
        if window.group_by == SalesGrouping.CATEGORY:
            return self.sales_by_category(window)
        return self.sales_over_time(window, TIME_BUCKETS[window.group_by])

    def sales_over_time(self, window: ReportWindow, bucket_key: Callable[[datetime], str]) -> List[Dict]:
        """
        Bucket order lines by the creation time of their order.

        ``date`` is the first order date seen in the bucket.
        """
        lines = self._get_revenue_line_query(
            window,
            Order.id,
            Order.created_at,
            OrderItem.total,
            OrderItem.cost,
            OrderItem.quantity
        ).order_by(Order.created_at).all()

        buckets: Dict[str, Dict] = {}
        for order_id, created_at, total, cost, quantity in lines:
            key = bucket_key(created_at)
            bucket = buckets.setdefault(key, {
                "key": key,
                "date": created_at,
                "sales": ZERO,
                "cost": ZERO,
                "quantity": 0,
                "orders": set(),
            })
            bucket["sales"] += to_money(total)
            bucket["cost"] += line_cost(cost, quantity)
            bucket["quantity"] += int(quantity)
            bucket["orders"].add(order_id)

        report = []
        for key in sorted(buckets):
            bucket = buckets[key]
            report.append({
                "key": key,
                "date": bucket["date"],
                **revenue_metrics(bucket["sales"], bucket["cost"]),
                "total_quantity": bucket["quantity"],
                "order_count": len(bucket["orders"]),
            })
        return report

    def sales_by_category(self, window: ReportWindow) -> List[Dict]:
        """Sales per category; lines of uncategorized products are left out"""
        rows = self._get_revenue_line_query(
            window,
            Category.id.label("category_id"),
            Category.name.label("category_name"),
            func.sum(OrderItem.total).label("total_sales"),
            func.sum(OrderItem.cost * OrderItem.quantity).label("total_cost"),
            func.sum(OrderItem.quantity).label("total_quantity"),
            func.count(func.distinct(OrderItem.product_id)).label("product_count")
        ).join(
            Product, OrderItem.product_id == Product.id
        ).join(
            Category, Product.category_id == Category.id
        ).group_by(
            Category.id, Category.name
        ).order_by(
            desc("total_sales")
        ).all()

        return [
            {
                "category_id": row.category_id,
                "category_name": row.category_name,
                **revenue_metrics(row.total_sales, row.total_cost),
                "total_quantity": int(row.total_quantity or 0),
                "product_count": row.product_count,
            }
            for row in rows
        ]
