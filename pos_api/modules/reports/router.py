"""
Reports Router

Manager-only report endpoints mounted under ``/orders/reports``.
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from pos_api.database.database import get_db
from pos_api.common.exceptions import ValidationError
from pos_api.common.responses import success_response
from pos_api.modules.auth.dependencies import require_manager
from pos_api.modules.auth.models import User
from .schemas import DashboardPeriod, ExportRequest, ReportType, SalesGrouping
from .services import SALES_FAMILY, build_report, list_report_types, parse_report_type
from .services.base import window_from_dates
from .services.dashboard import DashboardReportService
from .services.export import ReportExportService

reports_router = APIRouter(prefix="/orders/reports", tags=["Reports"])


@reports_router.get("/types")
def get_report_types(current_user: User = Depends(require_manager)):
    return success_response(list_report_types(), "Report types retrieved successfully")


@reports_router.get("/sales")
def generate_sales_report(
    start_date: Optional[date] = Query(None, description="First day of the report"),
    end_date: Optional[date] = Query(None, description="Last day of the report, inclusive"),
    group_by: SalesGrouping = Query(SalesGrouping.DAY),
    report_type: str = Query(ReportType.SALES.value),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    """
    Sales over time or by product/category. ``report_type`` may also select
    product-performance, payment-methods or staff-performance for the window.
    """
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required")

    selected = parse_report_type(report_type)
    if selected not in SALES_FAMILY:
        selected = ReportType.SALES

    window = window_from_dates(start_date, end_date, group_by)
    return success_response({
        "report": {
            "type": selected.value,
            "group_by": group_by.value,
            "period": {"start": window.start, "end": window.end},
            "generated_at": datetime.now(),
            "data": build_report(db, selected, window),
        }
    }, "Sales report generated successfully")


@reports_router.get("/inventory")
def generate_inventory_report(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    window = window_from_dates(None, None)
    return success_response({
        "report": {
            "type": ReportType.INVENTORY.value,
            "generated_at": datetime.now(),
            "data": build_report(db, ReportType.INVENTORY, window),
        }
    }, "Inventory report generated successfully")


@reports_router.get("/customers")
def generate_customer_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    window = window_from_dates(start_date, end_date)
    return success_response({
        "report": {
            "type": ReportType.CUSTOMER_ANALYTICS.value,
            "period": {"start": window.start, "end": window.end},
            "generated_at": datetime.now(),
            "data": build_report(db, ReportType.CUSTOMER_ANALYTICS, window),
        }
    }, "Customer report generated successfully")


@reports_router.get("/dashboard")
def generate_dashboard_report(
    period: DashboardPeriod = Query(DashboardPeriod.TODAY),
    start_date: Optional[date] = Query(None, description="Required for a custom period"),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    dashboard = DashboardReportService(db).generate(period, start_date, end_date)
    return success_response({
        "report": {
            "type": ReportType.DASHBOARD.value,
            "period": dashboard["period"],
            "generated_at": datetime.now(),
            "data": dashboard,
        }
    }, "Dashboard report generated successfully")


@reports_router.post("/export")
def export_report(
    export_request: ExportRequest,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    result = ReportExportService(db).export(export_request)
    if isinstance(result, Response):
        return result
    return success_response(result, "Report exported successfully")
