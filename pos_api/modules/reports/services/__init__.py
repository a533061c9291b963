"""
Report registry.

Each ``ReportType`` maps to a definition holding its description, the
callable that builds it from a ``ReportWindow`` and the rows it exports.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from pos_api.common.exceptions import ValidationError
from ..schemas import ReportType, ReportWindow, SalesGrouping, DashboardPeriod
from .customers import CustomerReportService
from .dashboard import DashboardReportService
from .inventory import InventoryReportService
from .performance import (
    ProductPerformanceReportService, PaymentMethodReportService, StaffPerformanceReportService
)
from .sales import SalesReportService


@dataclass(frozen=True)
class ReportDefinition:
    name: str
    description: str
    build: Callable[[Session, ReportWindow], Any]
    parameters: List[str] = field(default_factory=list)
    options: Dict[str, List[str]] = field(default_factory=dict)
    rows: Callable[[Any], List[Dict]] = lambda data: data


def _inventory_rows(data: Dict) -> List[Dict]:
    return [product for group in data["products_by_stock_status"] for product in group["products"]]


WINDOW_PARAMETERS = ["start_date", "end_date"]

REPORTS: Dict[ReportType, ReportDefinition] = {
    ReportType.SALES: ReportDefinition(
        name="Sales Report",
        description="Detailed sales analysis with various grouping options",
        build=lambda db, window: SalesReportService(db).generate(window),
        parameters=WINDOW_PARAMETERS + ["group_by"],
        options={"group_by": [grouping.value for grouping in SalesGrouping]},
    ),
    ReportType.INVENTORY: ReportDefinition(
        name="Inventory Report",
        description="Comprehensive inventory analysis and stock status",
        build=lambda db, window: InventoryReportService(db).generate(window),
        rows=_inventory_rows,
    ),
    ReportType.CUSTOMER_ANALYTICS: ReportDefinition(
        name="Customer Analytics",
        description="Customer behavior and lifetime value analysis",
        build=lambda db, window: CustomerReportService(db).generate(window),
        parameters=WINDOW_PARAMETERS,
        rows=lambda data: data["top_customers"],
    ),
    ReportType.PRODUCT_PERFORMANCE: ReportDefinition(
        name="Product Performance",
        description="Sales performance and profitability by product",
        build=lambda db, window: ProductPerformanceReportService(db).generate(window),
        parameters=WINDOW_PARAMETERS,
    ),
    ReportType.PAYMENT_METHODS: ReportDefinition(
        name="Payment Methods",
        description="Analysis of payment method usage and trends",
        build=lambda db, window: PaymentMethodReportService(db).generate(window),
        parameters=WINDOW_PARAMETERS,
    ),
    ReportType.STAFF_PERFORMANCE: ReportDefinition(
        name="Staff Performance",
        description="Sales performance and efficiency by staff members",
        build=lambda db, window: StaffPerformanceReportService(db).generate(window),
        parameters=WINDOW_PARAMETERS,
    ),
    ReportType.DASHBOARD: ReportDefinition(
        name="Dashboard Overview",
        description="Comprehensive business overview with key metrics",
        build=lambda db, window: DashboardReportService(db).for_window(window),
        parameters=["period"],
        options={"period": [period.value for period in DashboardPeriod]},
        rows=lambda data: data["product_performance"],
    ),
}

# Reports reachable through the sales endpoint's report_type parameter
SALES_FAMILY = (
    ReportType.SALES,
    ReportType.PRODUCT_PERFORMANCE,
    ReportType.PAYMENT_METHODS,
    ReportType.STAFF_PERFORMANCE,
)


def parse_report_type(value: str) -> ReportType:
    try:
        return ReportType(value)
    except ValueError:
        raise ValidationError("Invalid report type")


def build_report(db: Session, report_type: ReportType, window: ReportWindow) -> Any:
    return REPORTS[report_type].build(db, window)


def list_report_types() -> List[Dict]:
    return [
        {
            "type": report_type.value,
            "name": definition.name,
            "description": definition.description,
            "parameters": definition.parameters,
            **{f"{option}_options": values for option, values in definition.options.items()},
        }
        for report_type, definition in REPORTS.items()
    ]
