"""
Customer Analytics Service

Overview counts, monthly acquisition inside the window, top spenders and
lifetime-value buckets over ``total_spent``.
"""

from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func

from pos_api.common.money import ZERO, safe_divide, to_money
from pos_api.core.config import settings
from pos_api.modules.customers.models import Customer, CustomerType
from ..schemas import ReportWindow
from .base import BaseReportService

# Lower bounds of the lifetime-value buckets; the last one is open ended.
LIFETIME_VALUE_BOUNDARIES = (0, 100, 500, 1000, 5000, 10000)


def lifetime_value_bucket(total_spent: Decimal) -> str:
    """``"100-500"`` style label of the bucket holding ``total_spent``"""
    bounds = LIFETIME_VALUE_BOUNDARIES
    for lower, upper in zip(bounds, bounds[1:]):
        if lower <= total_spent < upper:
            return f"{lower}-{upper}"
    return f"{bounds[-1]}+"


class CustomerReportService(BaseReportService):
    """Service for generating customer analytics"""

    def generate(self, window: ReportWindow) -> Dict:
        return {
            "overview": self._overview(),
            "acquisition": self._acquisition(window),
            "top_customers": self._top_customers(),
            "lifetime_value": self._lifetime_value(),
        }

    def _overview(self) -> Dict:
        customers = self.db.query(Customer)
        return {
            "total_customers": customers.count(),
            "active_customers": customers.filter(Customer.is_active.is_(True)).count(),
            "vip_customers": customers.filter(Customer.customer_type == CustomerType.VIP).count(),
            "wholesale_customers": customers.filter(Customer.customer_type == CustomerType.WHOLESALE).count(),
            "total_loyalty_points": self.db.query(
                func.coalesce(func.sum(Customer.loyalty_points), 0)
            ).scalar(),
        }

    def _acquisition(self, window: ReportWindow) -> List[Dict]:
        created = self.db.query(Customer.created_at).filter(
            Customer.created_at >= window.start,
            Customer.created_at <= window.end
        ).all()

        counts: Dict[tuple, int] = {}
        for (created_at,) in created:
            key = (created_at.year, created_at.month)
            counts[key] = counts.get(key, 0) + 1

        return [
            {"year": year, "month": month, "new_customers": counts[(year, month)]}
            for year, month in sorted(counts)
        ]

    def _top_customers(self) -> List[Dict]:
        customers = self.db.query(Customer).filter(
            Customer.total_spent > 0
        ).order_by(
            Customer.total_spent.desc()
        ).limit(settings.TOP_CUSTOMERS_LIMIT).all()

        return [
            {
                "customer_id": customer.id,
                "name": customer.name,
                "email": customer.email,
                "phone": customer.phone,
                "customer_type": customer.customer_type.value,
                "total_spent": to_money(customer.total_spent),
                "order_count": customer.order_count,
                "loyalty_points": customer.loyalty_points,
                "last_order_date": customer.last_order_date,
                "average_order_value": to_money(safe_divide(customer.total_spent, customer.order_count)),
            }
            for customer in customers
        ]

    def _lifetime_value(self) -> List[Dict]:
        rows = self.db.query(Customer.total_spent, Customer.order_count).all()

        buckets: Dict[str, Dict] = {}
        for total_spent, order_count in rows:
            spent = to_money(total_spent)
            label = lifetime_value_bucket(spent)
            bucket = buckets.setdefault(label, {"bucket": label, "count": 0, "total_value": ZERO, "orders": 0})
            bucket["count"] += 1
            bucket["total_value"] += spent
            bucket["orders"] += order_count or 0

        ordered_labels = [
            f"{lower}-{upper}" for lower, upper in zip(LIFETIME_VALUE_BOUNDARIES, LIFETIME_VALUE_BOUNDARIES[1:])
        ] + [f"{LIFETIME_VALUE_BOUNDARIES[-1]}+"]

        return [
            {
                "bucket": label,
                "count": buckets[label]["count"],
                "total_value": buckets[label]["total_value"],
                "average_orders": to_money(safe_divide(buckets[label]["orders"], buckets[label]["count"])),
            }
            for label in ordered_labels
            if label in buckets
        ]
