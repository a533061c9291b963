"""
Dashboard Report Service

Bundles the headline reports for a named period.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, Optional, Tuple

from pos_api.common.exceptions import ValidationError
from pos_api.core.config import settings
from pos_api.modules.orders.queries import OrderQueryService
from ..schemas import DashboardPeriod, ReportWindow
from .base import BaseReportService
from .inventory import InventoryReportService
from .performance import (
    ProductPerformanceReportService, PaymentMethodReportService, StaffPerformanceReportService
)


def period_window(period: DashboardPeriod, start_date: Optional[date] = None,
                  end_date: Optional[date] = None, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = now or datetime.now()
    today = now.date()
    if period == DashboardPeriod.TODAY:
        return datetime.combine(today, time.min), datetime.combine(today, time.max)
    if period == DashboardPeriod.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return datetime.combine(yesterday, time.min), datetime.combine(yesterday, time.max)
    if period == DashboardPeriod.WEEK:
        return now - timedelta(days=7), now
    if period == DashboardPeriod.MONTH:
        return datetime(now.year, now.month, 1), now
    if period == DashboardPeriod.YEAR:
        return datetime(now.year, 1, 1), now
    if start_date is None:
        raise ValidationError("start_date is required for a custom period")
    end = datetime.combine(end_date, time.max) if end_date else now
    return datetime.combine(start_date, time.min), end


class DashboardReportService(BaseReportService):
    """Service for the dashboard overview"""

    def generate(self, period: DashboardPeriod = DashboardPeriod.TODAY,
                 start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict:
        start, end = period_window(period, start_date, end_date)
        return self.for_window(ReportWindow(start=start, end=end), period)

    def for_window(self, window: ReportWindow, period: DashboardPeriod = DashboardPeriod.CUSTOM) -> Dict:
        orders = OrderQueryService(self.db)
        products = ProductPerformanceReportService(self.db).generate(window)
        hourly = []
        if period == DashboardPeriod.TODAY:
            hourly = orders.hourly_sales(window.start, window.end, completed_only=True)

        return {
            "period": {"start": window.start, "end": window.end, "type": period.value},
            "sales": orders.sales_stats(window.start, window.end),
            "product_performance": products[:settings.TOP_PRODUCTS_LIMIT],
            "payment_methods": PaymentMethodReportService(self.db).generate(window),
            "staff_performance": StaffPerformanceReportService(self.db).generate(window),
            "inventory_summary": InventoryReportService(self.db).generate(),
            "hourly_sales": hourly,
        }
