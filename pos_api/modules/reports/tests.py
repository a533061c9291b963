"""
Tests for the Reports module

Orders are inserted directly with fixed timestamps so every window in the
assertions is deterministic:

- 2024-03-04 10:00  cashier  2 x coffee @100  cash   (cost 120)
- 2024-03-04 15:00  cashier  2 x tea @50      card   (cost 40)
- 2024-03-05 09:00  cashier  5 x coffee       cash   cancelled, never counted
- 2024-03-12 11:00  manager  1 x coffee @100  cash   (cost 60)
- 2024-04-02 12:00  cashier  1 x tea @50      mobile money
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from pos_api.common.exceptions import ValidationError
from pos_api.modules.customers.models import Customer, CustomerType
from pos_api.modules.orders.models import (
    Order, OrderItem, OrderPayment, OrderStatus, PaymentStatus, PaymentMethod, PaymentRecordStatus
)
from pos_api.modules.reports.schemas import (
    ReportType, SalesGrouping, DashboardPeriod, ExportRequest, ExportFormat
)
from pos_api.modules.reports.services import REPORTS, list_report_types, parse_report_type
from pos_api.modules.reports.services.base import window_from_dates
from pos_api.modules.reports.services.customers import CustomerReportService, lifetime_value_bucket
from pos_api.modules.reports.services.dashboard import DashboardReportService, period_window
from pos_api.modules.reports.services.export import ReportExportService
from pos_api.modules.reports.services.inventory import InventoryReportService
from pos_api.modules.reports.services.performance import (
    ProductPerformanceReportService, PaymentMethodReportService, StaffPerformanceReportService
)
from pos_api.modules.reports.services.sales import SalesReportService
from pos_api.modules.reports.utils import format_csv_value, render_csv


MARCH = window_from_dates(date(2024, 3, 1), date(2024, 3, 31))


# ===== FIXTURES =====

def record_sale(db, cashier, created_at, lines, method=PaymentMethod.CASH,
                status=OrderStatus.COMPLETED, payment_status=PaymentStatus.PAID) -> Order:
    """Insert a finished order; ``lines`` are ``(product, quantity, price)``"""
    total = sum((price * quantity for _, quantity, price in lines), Decimal("0"))
    cost = sum((product.cost * quantity for product, quantity, _ in lines), Decimal("0"))
    order = Order(
        order_number=f"ORD-TEST-{uuid4().hex[:8]}",
        subtotal=total,
        total_amount=total,
        total_cost=cost,
        status=status,
        payment_status=payment_status,
        cashier_id=cashier.id,
        created_at=created_at,
        updated_at=created_at
    )
    order.items = [
        OrderItem(
            position=position, product_id=product.id, name=product.name, sku=product.sku,
            price=price, cost=product.cost, quantity=quantity, total=price * quantity
        )
        for position, (product, quantity, price) in enumerate(lines)
    ]
    order.payment = OrderPayment(
        method=method, amount=total, status=PaymentRecordStatus.COMPLETED, paid_at=created_at
    )
    db.add(order)
    db.commit()
    return order


@pytest.fixture
def sales_history(db_session, cashier_user, manager_user, coffee, tea):
    price = Decimal("100")
    record_sale(db_session, cashier_user, datetime(2024, 3, 4, 10), [(coffee, 2, price)])
    record_sale(db_session, cashier_user, datetime(2024, 3, 4, 15), [(tea, 2, Decimal("50"))],
                method=PaymentMethod.CARD)
    record_sale(db_session, cashier_user, datetime(2024, 3, 5, 9), [(coffee, 5, price)],
                status=OrderStatus.CANCELLED, payment_status=PaymentStatus.REFUNDED)
    record_sale(db_session, manager_user, datetime(2024, 3, 12, 11), [(coffee, 1, price)])
    record_sale(db_session, cashier_user, datetime(2024, 4, 2, 12), [(tea, 1, Decimal("50"))],
                method=PaymentMethod.MOBILE_MONEY)


@pytest.fixture
def customers(db_session):
    spent = [Decimal("0"), Decimal("50"), Decimal("150"), Decimal("150"), Decimal("12000")]
    created = []
    for index, amount in enumerate(spent):
        customer = Customer(
            name=f"Customer {index}",
            phone=f"+2547100000{index:02d}",
            total_spent=amount,
            order_count=index,
            loyalty_points=10,
            customer_type=CustomerType.WHOLESALE if index == 4 else CustomerType.REGULAR
        )
        db_session.add(customer)
        created.append(customer)
    db_session.commit()
    return created


# ===== WINDOWS =====

class TestReportWindows:

    def test_end_day_is_inclusive(self):
        assert MARCH.start == datetime(2024, 3, 1)
        assert (MARCH.end.day, MARCH.end.hour, MARCH.end.minute) == (31, 23, 59)

    def test_default_window_is_year_to_date(self):
        window = window_from_dates(None, None)
        today = date.today()
        assert window.start == datetime(today.year, 1, 1)
        assert window.end.date() == today

    def test_dashboard_periods(self):
        now = datetime(2024, 3, 15, 13, 30)
        assert period_window(DashboardPeriod.TODAY, now=now)[0] == datetime(2024, 3, 15)
        assert period_window(DashboardPeriod.YESTERDAY, now=now)[0] == datetime(2024, 3, 14)
        assert period_window(DashboardPeriod.MONTH, now=now) == (datetime(2024, 3, 1), now)
        assert period_window(DashboardPeriod.YEAR, now=now) == (datetime(2024, 1, 1), now)

    def test_custom_period_needs_start_date(self):
        with pytest.raises(ValidationError):
            period_window(DashboardPeriod.CUSTOM)


# ===== SALES =====

class TestSalesReport:
    """Sales over time and by dimension"""

    def test_daily_buckets(self, db_session, sales_history):
        report = SalesReportService(db_session).generate(MARCH)

        assert [row["key"] for row in report] == ["2024-03-04", "2024-03-12"]
        first = report[0]
        assert first["total_sales"] == Decimal("300.00")
        assert first["total_cost"] == Decimal("160.00")
        assert first["total_profit"] == Decimal("140.00")
        assert first["profit_margin"] == Decimal("46.67")
        assert first["total_quantity"] == 4
        assert first["order_count"] == 2
        assert first["date"] == datetime(2024, 3, 4, 10)

    def test_weekly_buckets_use_iso_weeks(self, db_session, sales_history):
        window = window_from_dates(date(2024, 3, 1), date(2024, 3, 31), SalesGrouping.WEEK)
        report = SalesReportService(db_session).generate(window)
        assert [row["key"] for row in report] == ["2024-W10", "2024-W11"]

    def test_monthly_buckets(self, db_session, sales_history):
        window = window_from_dates(date(2024, 3, 1), date(2024, 4, 30), SalesGrouping.MONTH)
        report = SalesReportService(db_session).generate(window)
        assert [(row["key"], row["total_sales"]) for row in report] == [
            ("2024-03", Decimal("400.00")),
            ("2024-04", Decimal("50.00")),
        ]

    def test_by_product(self, db_session, sales_history):
        window = window_from_dates(date(2024, 3, 1), date(2024, 3, 31), SalesGrouping.PRODUCT)
        report = SalesReportService(db_session).generate(window)

        assert [row["product_name"] for row in report] == ["Coffee Beans", "Green Tea"]
        coffee_row = report[0]
        assert coffee_row["total_sales"] == Decimal("300.00")
        assert coffee_row["total_quantity"] == 3
        assert coffee_row["order_count"] == 2
        assert coffee_row["average_price"] == Decimal("100.00")
        assert coffee_row["revenue_per_unit"] == Decimal("100.00")
        assert coffee_row["category_name"] == "Beverages"

    def test_by_category(self, db_session, sales_history):
        window = window_from_dates(date(2024, 3, 1), date(2024, 3, 31), SalesGrouping.CATEGORY)
        report = SalesReportService(db_session).generate(window)

        assert len(report) == 1
        assert report[0]["category_name"] == "Beverages"
        assert report[0]["total_sales"] == Decimal("400.00")
        assert report[0]["product_count"] == 2

    def test_empty_window(self, db_session, sales_history):
        window = window_from_dates(date(2023, 1, 1), date(2023, 1, 31))
        assert SalesReportService(db_session).generate(window) == []


class TestPerformanceReports:

    def test_payment_method_share_of_total(self, db_session, sales_history):
        report = PaymentMethodReportService(db_session).generate(MARCH)

        assert [row["payment_method"] for row in report] == ["cash", "card"]
        cash, card = report
        assert cash["total_amount"] == Decimal("300.00")
        assert cash["order_count"] == 2
        assert cash["average_order_value"] == Decimal("150.00")
        assert cash["percentage"] == Decimal("75.00")
        assert card["percentage"] == Decimal("25.00")
        assert sum(row["percentage"] for row in report) == Decimal("100.00")

    def test_staff_performance(self, db_session, sales_history, cashier_user, manager_user):
        report = StaffPerformanceReportService(db_session).generate(MARCH)

        assert [row["cashier_id"] for row in report] == [cashier_user.id, manager_user.id]
        cashier_row = report[0]
        assert cashier_row["cashier_name"] == "Carl Cashier"
        assert cashier_row["total_sales"] == Decimal("300.00")
        assert cashier_row["order_count"] == 2
        assert cashier_row["total_items"] == 2
        assert cashier_row["items_per_order"] == Decimal("1.00")
        assert cashier_row["total_profit"] == Decimal("140.00")

    def test_cancelled_orders_are_ignored(self, db_session, sales_history):
        window = window_from_dates(date(2024, 3, 5), date(2024, 3, 5))
        assert ProductPerformanceReportService(db_session).generate(window) == []
        assert PaymentMethodReportService(db_session).generate(window) == []


# ===== INVENTORY =====

class TestInventoryReport:

    def test_stock_buckets_and_value(self, db_session, coffee, tea, delivery_fee):
        report = InventoryReportService(db_session).generate()

        assert report["summary"] == {
            "total_products": 3,
            "total_value": Decimal("700.00"),
            "total_stock": 15,
            "out_of_stock": 1,
            "low_stock": 1,
        }
        assert [group["status"] for group in report["products_by_stock_status"]] == [
            "in-stock", "low-stock", "out-of-stock"
        ]
        assert [row["name"] for row in report["top_products_by_value"]] == ["Coffee Beans", "Green Tea"]
        assert [row["name"] for row in report["low_stock_products"]] == ["Green Tea"]


# ===== CUSTOMERS =====

class TestCustomerReport:

    @pytest.mark.parametrize("amount,bucket", [
        (Decimal("0"), "0-100"),
        (Decimal("99.99"), "0-100"),
        (Decimal("100"), "100-500"),
        (Decimal("4999.99"), "1000-5000"),
        (Decimal("10000"), "10000+"),
    ])
    def test_lifetime_value_bucket(self, amount, bucket):
        assert lifetime_value_bucket(amount) == bucket

    def test_customer_analytics(self, db_session, customers):
        report = CustomerReportService(db_session).generate(window_from_dates(None, None))

        assert report["overview"]["total_customers"] == 5
        assert report["overview"]["wholesale_customers"] == 1
        assert report["overview"]["total_loyalty_points"] == 50

        top = report["top_customers"]
        assert len(top) == 4
        assert top[0]["name"] == "Customer 4"
        assert top[0]["average_order_value"] == Decimal("3000.00")

        assert [(row["bucket"], row["count"]) for row in report["lifetime_value"]] == [
            ("0-100", 2), ("100-500", 2), ("10000+", 1)
        ]

        today = date.today()
        assert report["acquisition"] == [{"year": today.year, "month": today.month, "new_customers": 5}]


# ===== DASHBOARD =====

class TestDashboard:

    def test_today(self, db_session, cashier_user, coffee):
        record_sale(db_session, cashier_user, datetime.now(), [(coffee, 2, Decimal("100"))])

        dashboard = DashboardReportService(db_session).generate(DashboardPeriod.TODAY)

        assert dashboard["period"]["type"] == "today"
        assert dashboard["sales"]["total_sales"] == Decimal("200.00")
        assert dashboard["sales"]["total_orders"] == 1
        assert dashboard["product_performance"][0]["product_name"] == "Coffee Beans"
        assert dashboard["payment_methods"][0]["percentage"] == Decimal("100.00")
        assert dashboard["staff_performance"][0]["cashier_name"] == "Carl Cashier"
        assert dashboard["inventory_summary"]["summary"]["total_products"] == 1
        assert len(dashboard["hourly_sales"]) == 1

    def test_non_today_periods_have_no_hourly_series(self, db_session, sales_history):
        dashboard = DashboardReportService(db_session).generate(
            DashboardPeriod.CUSTOM, date(2024, 3, 1), date(2024, 3, 31)
        )
        assert dashboard["hourly_sales"] == []
        assert dashboard["sales"]["total_sales"] == Decimal("400.00")

    def test_empty_window_has_zero_margin(self, db_session):
        dashboard = DashboardReportService(db_session).generate(DashboardPeriod.TODAY)
        assert dashboard["sales"]["total_orders"] == 0
        assert dashboard["sales"]["average_order_value"] == Decimal("0")
        assert dashboard["product_performance"] == []


# ===== REGISTRY AND EXPORT =====

class TestReportRegistry:

    def test_every_report_type_is_registered(self):
        assert set(REPORTS) == set(ReportType)
        assert len(list_report_types()) == len(ReportType)

    def test_sales_definition_lists_grouping_options(self):
        sales = next(item for item in list_report_types() if item["type"] == "sales")
        assert sales["group_by_options"] == ["day", "week", "month", "year", "product", "category"]

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc:
            parse_report_type("profit-and-loss")
        assert exc.value.message == "Invalid report type"


class TestExport:

    def test_json_export(self, db_session, sales_history):
        result = ReportExportService(db_session).export(ExportRequest(
            report_type="payment-methods", start_date=date(2024, 3, 1), end_date=date(2024, 3, 31)
        ))
        assert result["report_type"] == "payment-methods"
        assert result["format"] == "json"
        assert len(result["data"]) == 2

    def test_csv_export_has_header_row(self, db_session, sales_history):
        response = ReportExportService(db_session).export(ExportRequest(
            report_type="sales", format=ExportFormat.CSV,
            start_date=date(2024, 3, 1), end_date=date(2024, 3, 31)
        ))
        lines = response.body.decode().splitlines()
        assert lines[0] == (
            "Period,First Order,Total Sales,Total Cost,Total Profit,Profit Margin (%),Quantity,Orders"
        )
        assert lines[1] == "2024-03-04,2024-03-04T10:00:00,300.00,160.00,140.00,46.67,4,2"
        assert response.headers["content-disposition"] == "attachment; filename=sales_20240301_20240331.csv"

    def test_missing_report_type(self, db_session):
        with pytest.raises(ValidationError) as exc:
            ReportExportService(db_session).export(ExportRequest())
        assert exc.value.message == "Report type is required"

    def test_empty_csv_keeps_headers(self):
        assert render_csv([], {"name": "Product"}).splitlines() == ["Product"]

    def test_format_csv_value(self):
        assert format_csv_value(None) == ""
        assert format_csv_value(True) == "Yes"
        assert format_csv_value(Decimal("1.50")) == "1.50"
        assert format_csv_value(date(2024, 3, 1)) == "2024-03-01"
        assert format_csv_value(PaymentMethod.CASH) == "cash"


# ===== ENDPOINTS =====

class TestReportEndpoints:

    def test_reports_are_manager_only(self, client, cashier_headers):
        response = client.get("/api/orders/reports/types", headers=cashier_headers)
        assert response.status_code == 403

    def test_types(self, client, manager_headers):
        response = client.get("/api/orders/reports/types", headers=manager_headers)
        assert response.status_code == 200
        assert len(response.json()["data"]) == 7

    def test_sales_requires_dates(self, client, manager_headers):
        response = client.get("/api/orders/reports/sales", headers=manager_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Start date and end date are required"

    def test_sales_report(self, client, manager_headers, sales_history):
        response = client.get(
            "/api/orders/reports/sales",
            params={"start_date": "2024-03-01", "end_date": "2024-04-30", "group_by": "month"},
            headers=manager_headers
        )
        assert response.status_code == 200
        report = response.json()["data"]["report"]
        assert report["type"] == "sales"
        assert report["group_by"] == "month"
        assert [row["key"] for row in report["data"]] == ["2024-03", "2024-04"]
        assert report["data"][0]["total_sales"] == pytest.approx(400.0)

    def test_sales_endpoint_selects_related_report(self, client, manager_headers, sales_history):
        response = client.get(
            "/api/orders/reports/sales",
            params={"start_date": "2024-03-01", "end_date": "2024-03-31", "report_type": "payment-methods"},
            headers=manager_headers
        )
        report = response.json()["data"]["report"]
        assert report["type"] == "payment-methods"
        assert report["data"][0]["percentage"] == pytest.approx(75.0)

    def test_sales_endpoint_rejects_unknown_type(self, client, manager_headers):
        response = client.get(
            "/api/orders/reports/sales",
            params={"start_date": "2024-03-01", "end_date": "2024-03-31", "report_type": "bogus"},
            headers=manager_headers
        )
        assert response.status_code == 400

    def test_inventory_and_customers(self, client, manager_headers, coffee, customers):
        inventory = client.get("/api/orders/reports/inventory", headers=manager_headers)
        assert inventory.json()["data"]["report"]["data"]["summary"]["total_products"] == 1

        analytics = client.get("/api/orders/reports/customers", headers=manager_headers)
        assert analytics.json()["data"]["report"]["data"]["overview"]["total_customers"] == 5

    def test_dashboard_custom_period_without_start(self, client, manager_headers):
        response = client.get(
            "/api/orders/reports/dashboard", params={"period": "custom"}, headers=manager_headers
        )
        assert response.status_code == 400

    def test_export_csv(self, client, manager_headers, sales_history):
        response = client.post(
            "/api/orders/reports/export",
            json={"report_type": "staff-performance", "format": "csv",
                  "start_date": "2024-03-01", "end_date": "2024-03-31"},
            headers=manager_headers
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0].startswith("Cashier,Email,Total Sales")
        assert len(lines) == 3

    def test_export_json_envelope(self, client, manager_headers, sales_history):
        response = client.post(
            "/api/orders/reports/export",
            json={"report_type": "inventory"},
            headers=manager_headers
        )
        body = response.json()
        assert body["success"] is True
        assert body["data"]["report_type"] == "inventory"

    def test_export_rejects_inverted_dates(self, client, manager_headers):
        response = client.post(
            "/api/orders/reports/export",
            json={"report_type": "sales", "start_date": "2024-03-31", "end_date": "2024-03-01"},
            headers=manager_headers
        )
        assert response.status_code == 422
