"""
Utilities for Reports module

CSV export of report rows.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import Response

from ..schemas import ReportType, SalesGrouping


def create_csv_response(
    data: List[Dict[str, Any]],
    filename: str,
    headers: Optional[Dict[str, str]] = None
) -> Response:
    """
    Create a CSV response from a list of dictionaries.

    Args:
        data: List of dictionaries with report data
        filename: Name for the CSV file
        headers: Optional mapping of field names to CSV headers

    Returns:
        FastAPI Response with CSV content
    """
    return Response(
        content=render_csv(data, headers),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


def render_csv(data: List[Dict[str, Any]], headers: Optional[Dict[str, str]] = None) -> str:
    if not data and not headers:
        return ""

    output = io.StringIO()
    fieldnames = list(headers.keys()) if headers else list(data[0].keys())
    csv_headers = list(headers.values()) if headers else fieldnames

    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
    writer.writerow(dict(zip(fieldnames, csv_headers)))
    for row in data:
        writer.writerow({key: format_csv_value(row.get(key)) for key in fieldnames})

    csv_content = output.getvalue()
    output.close()
    return csv_content


def format_csv_value(value: Any) -> str:
    """
    Format a value for CSV export.

    Args:
        value: Value to format

    Returns:
        String representation suitable for CSV
    """
    if value is None:
        return ""
    elif isinstance(value, Enum):
        return str(value.value)
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, (date, datetime)):
        return value.isoformat()
    elif isinstance(value, bool):
        return "Yes" if value else "No"
    elif isinstance(value, UUID):
        return str(value)
    else:
        return str(value)


def csv_headers_for(report_type: ReportType, group_by: SalesGrouping = SalesGrouping.DAY) -> Dict[str, str]:
    if report_type == ReportType.SALES:
        if group_by == SalesGrouping.PRODUCT:
            return CSV_HEADERS["product_performance"]
        if group_by == SalesGrouping.CATEGORY:
            return CSV_HEADERS["sales_by_category"]
        return CSV_HEADERS["sales_over_time"]
    if report_type == ReportType.DASHBOARD:
        return CSV_HEADERS["product_performance"]
    return CSV_HEADERS[report_type.value.replace("-", "_")]


_METRIC_HEADERS = {
    "total_sales": "Total Sales",
    "total_cost": "Total Cost",
    "total_profit": "Total Profit",
    "profit_margin": "Profit Margin (%)",
}

CSV_HEADERS = {
    "sales_over_time": {
        "key": "Period",
        "date": "First Order",
        **_METRIC_HEADERS,
        "total_quantity": "Quantity",
        "order_count": "Orders",
    },
    "sales_by_category": {
        "category_name": "Category",
        **_METRIC_HEADERS,
        "total_quantity": "Quantity",
        "product_count": "Products",
    },
    "product_performance": {
        "product_name": "Product",
        "sku": "SKU",
        "category_name": "Category",
        **_METRIC_HEADERS,
        "total_quantity": "Quantity",
        "order_count": "Orders",
        "average_price": "Average Price",
        "revenue_per_unit": "Revenue per Unit",
    },
    "payment_methods": {
        "payment_method": "Payment Method",
        "total_amount": "Total Amount",
        "order_count": "Orders",
        "average_order_value": "Average Order Value",
        "percentage": "Share (%)",
    },
    "staff_performance": {
        "cashier_name": "Cashier",
        "cashier_email": "Email",
        "total_sales": "Total Sales",
        "order_count": "Orders",
        "average_order_value": "Average Order Value",
        "total_items": "Items",
        "items_per_order": "Items per Order",
        "total_profit": "Total Profit",
        "profit_margin": "Profit Margin (%)",
    },
    "inventory": {
        "name": "Product",
        "sku": "SKU",
        "stock": "Stock",
        "low_stock_alert": "Low Stock Alert",
        "cost": "Cost",
        "price": "Price",
        "stock_value": "Stock Value",
        "stock_status": "Status",
    },
    "customer_analytics": {
        "name": "Customer",
        "email": "Email",
        "phone": "Phone",
        "customer_type": "Type",
        "total_spent": "Total Spent",
        "order_count": "Orders",
        "average_order_value": "Average Order Value",
        "loyalty_points": "Loyalty Points",
        "last_order_date": "Last Order",
    },
}
