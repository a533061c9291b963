"""
Pydantic schemas and enums for the Reports module
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ReportType(str, enum.Enum):
    SALES = "sales"
    INVENTORY = "inventory"
    CUSTOMER_ANALYTICS = "customer-analytics"
    PRODUCT_PERFORMANCE = "product-performance"
    PAYMENT_METHODS = "payment-methods"
    STAFF_PERFORMANCE = "staff-performance"
    DASHBOARD = "dashboard"


class SalesGrouping(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    PRODUCT = "product"
    CATEGORY = "category"


class DashboardPeriod(str, enum.Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


class ExportFormat(str, enum.Enum):
    JSON = "json"
    CSV = "csv"


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive ``[start, end]`` time window a report is computed over"""
    start: datetime
    end: datetime
    group_by: SalesGrouping = SalesGrouping.DAY


class ExportRequest(BaseModel):
    """Body of ``POST /reports/export``"""
    report_type: Optional[str] = Field(None, description="One of the report types")
    format: ExportFormat = Field(ExportFormat.JSON, description="json or csv")
    start_date: Optional[date] = Field(None, description="Defaults to January 1st of the current year")
    end_date: Optional[date] = Field(None, description="Defaults to today, inclusive")
    group_by: SalesGrouping = Field(SalesGrouping.DAY, description="Grouping for sales reports")
    options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v, info):
        start = info.data.get("start_date")
        if v and start and v < start:
            raise ValueError("end_date must be greater than or equal to start_date")
        return v
