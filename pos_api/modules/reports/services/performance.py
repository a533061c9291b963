"""
Performance Reports Service

Revenue broken down by product, by payment method and by cashier.
"""

from typing import Dict, List

from sqlalchemy import desc, func

from pos_api.common.money import ZERO, HUNDRED, safe_divide, to_money
from pos_api.modules.auth.models import User
from pos_api.modules.categories.models import Category
from pos_api.modules.orders.models import Order, OrderItem, OrderPayment
from pos_api.modules.products.models import Product
from ..schemas import ReportWindow
from .base import BaseReportService, revenue_metrics


class ProductPerformanceReportService(BaseReportService):
    """Revenue, profit and volume per product"""

    def generate(self, window: ReportWindow) -> List[Dict]:
        rows = self._get_revenue_line_query(
            window,
            OrderItem.product_id,
            Product.name.label("product_name"),
            Product.sku.label("sku"),
            Category.name.label("category_name"),
            func.sum(OrderItem.total).label("total_sales"),
            func.sum(OrderItem.cost * OrderItem.quantity).label("total_cost"),
            func.sum(OrderItem.quantity).label("total_quantity"),
            func.count(func.distinct(Order.id)).label("order_count"),
            func.avg(OrderItem.price).label("average_price")
        ).join(
            Product, OrderItem.product_id == Product.id
        ).outerjoin(
            Category, Product.category_id == Category.id
        ).group_by(
            OrderItem.product_id, Product.name, Product.sku, Category.name
        ).order_by(
            desc("total_sales")
        ).all()

        report = []
        for row in rows:
            quantity = int(row.total_quantity or 0)
            metrics = revenue_metrics(row.total_sales, row.total_cost)
            report.append({
                "product_id": row.product_id,
                "product_name": row.product_name,
                "sku": row.sku,
                "category_name": row.category_name,
                **metrics,
                "total_quantity": quantity,
                "order_count": row.order_count,
                "average_price": to_money(row.average_price),
                "revenue_per_unit": to_money(safe_divide(metrics["total_sales"], quantity)),
            })
        return report


class PaymentMethodReportService(BaseReportService):
    """Revenue per payment method and its share of the window's revenue"""

    def generate(self, window: ReportWindow) -> List[Dict]:
        rows = self._get_revenue_order_query(window).join(
            OrderPayment, OrderPayment.order_id == Order.id
        ).with_entities(
            OrderPayment.method,
            func.sum(Order.total_amount).label("total_amount"),
            func.count(Order.id).label("order_count")
        ).group_by(
            OrderPayment.method
        ).all()

        grand_total = sum((to_money(row.total_amount) for row in rows), ZERO)
        report = []
        for row in rows:
            total = to_money(row.total_amount)
            report.append({
                "payment_method": row.method.value,
                "total_amount": total,
                "order_count": row.order_count,
                "average_order_value": to_money(safe_divide(total, row.order_count)),
                "percentage": to_money(safe_divide(total * HUNDRED, grand_total)),
            })
        report.sort(key=lambda item: item["total_amount"], reverse=True)
        return report


class StaffPerformanceReportService(BaseReportService):
    """Sales and efficiency per cashier"""

    def generate(self, window: ReportWindow) -> List[Dict]:
        rows = self._get_revenue_order_query(window).join(
            User, Order.cashier_id == User.id
        ).with_entities(
            Order.cashier_id,
            User.name.label("cashier_name"),
            User.email.label("cashier_email"),
            func.sum(Order.total_amount).label("total_sales"),
            func.sum(Order.total_cost).label("total_cost"),
            func.count(Order.id).label("order_count")
        ).group_by(
            Order.cashier_id, User.name, User.email
        ).all()

        items_by_cashier = dict(
            self._get_revenue_line_query(
                window, Order.cashier_id, func.count(OrderItem.id)
            ).group_by(Order.cashier_id).all()
        )

        report = []
        for row in rows:
            metrics = revenue_metrics(row.total_sales, row.total_cost)
            total_items = items_by_cashier.get(row.cashier_id, 0)
            report.append({
                "cashier_id": row.cashier_id,
                "cashier_name": row.cashier_name,
                "cashier_email": row.cashier_email,
                "total_sales": metrics["total_sales"],
                "order_count": row.order_count,
                "average_order_value": to_money(safe_divide(metrics["total_sales"], row.order_count)),
                "total_items": total_items,
                "total_profit": metrics["total_profit"],
                "items_per_order": to_money(safe_divide(total_items, row.order_count)),
                "profit_margin": metrics["profit_margin"],
            })
        report.sort(key=lambda item: item["total_sales"], reverse=True)
        return report
