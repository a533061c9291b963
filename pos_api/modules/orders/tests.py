"""
Tests for the orders module

Covers:
- Checkout pricing, validation order and atomicity
- Order numbering and the emergency fallback
- Status transitions with stock compensation
- Refunds
- Queries, statistics and the HTTP endpoints
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from pos_api.common.exceptions import (
    ValidationError, NotFoundError, InvalidStateError, InsufficientStockError,
    PaymentInsufficientError, RefundExceedsTotalError, InvalidStatusError, InternalError
)
from pos_api.modules.customers.crud import CustomerStore
from pos_api.modules.orders.crud import OrderRepository
from pos_api.modules.orders.lifecycle import OrderLifecycleService
from pos_api.modules.orders.models import (
    Order, OrderStatus, PaymentStatus, PaymentRecordStatus, OrderType
)
from pos_api.modules.orders.numbering import (
    OrderNumberGenerator, format_order_number, emergency_order_number
)
from pos_api.modules.orders.queries import OrderQueryService, OrderFilters, resolve_period
from pos_api.modules.orders.schemas import OrderCreate
from pos_api.modules.orders.service import CheckoutService
from pos_api.modules.store_settings.models import Setting


# ===== FIXTURES =====

@pytest.fixture
def cart(coffee, tea):
    """3 coffee @ 100 plus 1 tea @ 50 with a 10 line discount"""
    return [
        {"product": coffee.id, "quantity": 3, "price": Decimal("100")},
        {"product": tea.id, "quantity": 1, "price": Decimal("50"), "discount": Decimal("10")},
    ]


def make_order_data(items, amount="400", method="cash", **extra) -> OrderCreate:
    payload = {
        "items": items,
        "tax_rate": Decimal("16"),
        "payment": {"method": method, "amount": Decimal(amount)},
    }
    payload.update(extra)
    return OrderCreate(**payload)


@pytest.fixture
def checkout(db_session):
    return CheckoutService(db_session)


@pytest.fixture
def placed_order(checkout, cart, cashier_user):
    return checkout.create_order(make_order_data(cart), cashier_user.id)


# ===== INPUT NORMALIZATION =====

class TestOrderCreateSchema:

    def test_flat_payment_fields_are_folded_into_payment(self, cart):
        data = OrderCreate(items=cart, payment_method="card", payment_amount="500", transaction_id="TX-1")
        assert data.payment.method.value == "card"
        assert data.payment.amount == Decimal("500")
        assert data.payment.transaction_id == "TX-1"

    def test_payment_object_wins_over_flat_fields(self, cart):
        data = OrderCreate(
            items=cart,
            payment={"method": "mobile_money", "amount": "450"},
            payment_method="cash",
            payment_amount="10"
        )
        assert data.payment.method.value == "mobile_money"
        assert data.payment.amount == Decimal("450")

    def test_missing_payment_gives_empty_intent(self, cart):
        data = OrderCreate(items=cart)
        assert data.payment.method is None
        assert data.payment.amount is None


# ===== CHECKOUT =====

class TestCheckout:
    """Checkout pricing, validation and side effects"""

    def test_reference_cart_is_priced_and_accepted(self, db_session, placed_order, coffee, tea):
        assert placed_order.subtotal == Decimal("340")
        assert placed_order.tax_amount == Decimal("54.4")
        assert placed_order.total_amount == Decimal("394.4")
        assert placed_order.total_cost == Decimal("200")
        assert placed_order.total_amount == (
            placed_order.subtotal + placed_order.tax_amount
            + placed_order.shipping_amount - placed_order.discount_amount
        )

        db_session.refresh(coffee)
        db_session.refresh(tea)
        assert coffee.stock == 7
        assert tea.stock == 4

    def test_walk_in_order_is_completed_and_paid(self, placed_order):
        assert placed_order.order_type == OrderType.WALK_IN
        assert placed_order.status == OrderStatus.COMPLETED
        assert placed_order.payment_status == PaymentStatus.PAID
        assert placed_order.payment.status == PaymentRecordStatus.COMPLETED
        assert placed_order.payment.paid_at is not None

    def test_delivery_order_starts_confirmed(self, checkout, cart, cashier_user):
        order = checkout.create_order(
            make_order_data(cart, order_type="delivery", delivery_address={"city": "Nairobi"}),
            cashier_user.id
        )
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        assert order.delivery_address == {"city": "Nairobi"}

    def test_lines_are_snapshots_in_cart_order(self, placed_order, coffee, tea):
        first, second = placed_order.items
        assert (first.name, first.sku, first.quantity, first.total) == ("Coffee Beans", "COF-001", 3, Decimal("300"))
        assert (second.name, second.discount, second.total) == ("Green Tea", Decimal("10"), Decimal("40"))
        assert first.cost == Decimal("60")

    def test_insufficient_payment_persists_nothing(self, db_session, checkout, cart, cashier_user, coffee, tea):
        with pytest.raises(PaymentInsufficientError) as exc:
            checkout.create_order(make_order_data(cart, amount="300"), cashier_user.id)

        assert exc.value.status_code == 400
        assert "is less than total amount" in exc.value.message
        assert db_session.query(Order).count() == 0
        db_session.refresh(coffee)
        db_session.refresh(tea)
        assert coffee.stock == 10
        assert tea.stock == 5

    def test_empty_cart_is_rejected_first(self, checkout, cashier_user):
        with pytest.raises(ValidationError) as exc:
            checkout.create_order(OrderCreate(items=[]), cashier_user.id)
        assert exc.value.message == "Order must contain at least one item"

    def test_missing_payment_is_rejected(self, checkout, cart, cashier_user):
        with pytest.raises(ValidationError) as exc:
            checkout.create_order(OrderCreate(items=cart, payment={"method": "cash"}), cashier_user.id)
        assert exc.value.message == "Payment method and amount are required"

    def test_zero_payment_amount_counts_as_missing(self, checkout, cart, cashier_user):
        with pytest.raises(ValidationError):
            checkout.create_order(make_order_data(cart, amount="0"), cashier_user.id)

    def test_unknown_customer_is_rejected(self, checkout, cart, cashier_user):
        with pytest.raises(NotFoundError) as exc:
            checkout.create_order(make_order_data(cart, customer=uuid4()), cashier_user.id)
        assert exc.value.message == "Customer not found"

    def test_unknown_product_is_rejected(self, checkout, cashier_user, coffee):
        missing = uuid4()
        items = [{"product": missing, "quantity": 1, "price": Decimal("10")}]
        with pytest.raises(NotFoundError) as exc:
            checkout.create_order(make_order_data(items), cashier_user.id)
        assert exc.value.message == f"Product not found: {missing}"

    def test_inactive_product_is_rejected(self, checkout, cashier_user, discontinued):
        items = [{"product": discontinued.id, "quantity": 1, "price": Decimal("30")}]
        with pytest.raises(InvalidStateError) as exc:
            checkout.create_order(make_order_data(items), cashier_user.id)
        assert exc.value.message == "Product is not active: Old Mug"

    def test_insufficient_stock_names_product_and_quantity(self, db_session, checkout, cashier_user, tea):
        items = [{"product": tea.id, "quantity": 6, "price": Decimal("50")}]
        with pytest.raises(InsufficientStockError) as exc:
            checkout.create_order(make_order_data(items), cashier_user.id)
        assert exc.value.message == "Insufficient stock for: Green Tea. Available: 5"
        db_session.refresh(tea)
        assert tea.stock == 5

    def test_ordering_all_available_stock(self, db_session, checkout, cashier_user, tea):
        items = [{"product": tea.id, "quantity": 5, "price": Decimal("50")}]
        order = checkout.create_order(make_order_data(items, amount="250", tax_rate=Decimal("0")), cashier_user.id)
        assert order.total_amount == Decimal("250")
        db_session.refresh(tea)
        assert tea.stock == 0

    def test_exact_payment_is_accepted(self, checkout, cart, cashier_user):
        order = checkout.create_order(make_order_data(cart, amount="394.40"), cashier_user.id)
        assert order.total_amount == Decimal("394.40")
        assert order.payment.amount == Decimal("394.40")
        assert order.payment_status == PaymentStatus.PAID

    def test_line_discount_above_line_amount_is_rejected(self, db_session, checkout, cashier_user, coffee):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("10"), "discount": Decimal("50")}]
        with pytest.raises(ValidationError) as exc:
            checkout.create_order(make_order_data(items), cashier_user.id)

        assert exc.value.message == "Discount exceeds line amount for: Coffee Beans"
        assert db_session.query(Order).count() == 0
        db_session.refresh(coffee)
        assert coffee.stock == 10

    def test_negative_order_total_is_rejected(self, db_session, checkout, cashier_user, coffee, sample_customer):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        with pytest.raises(ValidationError) as exc:
            checkout.create_order(
                make_order_data(items, amount="1", discount_amount=Decimal("500"), customer=sample_customer.id),
                cashier_user.id
            )

        assert exc.value.message == "Order total cannot be negative"
        assert db_session.query(Order).count() == 0
        db_session.refresh(coffee)
        db_session.refresh(sample_customer)
        assert coffee.stock == 10
        assert sample_customer.total_spent == Decimal("0")
        assert sample_customer.order_count == 0

    def test_untracked_products_skip_stock(self, db_session, checkout, cashier_user, delivery_fee):
        items = [{"product": delivery_fee.id, "quantity": 2, "price": Decimal("80")}]
        order = checkout.create_order(make_order_data(items, amount="200", tax_rate=Decimal("0")), cashier_user.id)
        assert order.total_amount == Decimal("160")
        db_session.refresh(delivery_fee)
        assert delivery_fee.stock == 0

    def test_explicit_tax_amount_overrides_computed_tax(self, checkout, cart, cashier_user):
        order = checkout.create_order(make_order_data(cart, tax_amount=Decimal("20")), cashier_user.id)
        assert order.tax_amount == Decimal("20")
        assert order.total_amount == Decimal("360")

    def test_non_taxable_order_has_no_tax(self, checkout, cart, cashier_user):
        order = checkout.create_order(make_order_data(cart, is_taxable=False), cashier_user.id)
        assert order.tax_amount == Decimal("0")
        assert order.total_amount == Decimal("340")

    def test_shipping_and_discount_enter_the_total(self, checkout, cart, cashier_user):
        order = checkout.create_order(
            make_order_data(cart, amount="500", shipping_amount=Decimal("25"), discount_amount=Decimal("14.4")),
            cashier_user.id
        )
        assert order.total_amount == Decimal("405")

    def test_default_tax_rate_comes_from_store_settings(self, db_session, checkout, cart, cashier_user):
        db_session.add(Setting(tax_enabled=True, tax_rate=Decimal("10")))
        db_session.commit()

        data = OrderCreate(items=cart, payment={"method": "cash", "amount": "400"})
        order = checkout.create_order(data, cashier_user.id)
        assert order.tax_rate == Decimal("10")
        assert order.tax_amount == Decimal("34")

    def test_default_tax_rate_is_zero_when_tax_disabled(self, checkout, cart, cashier_user):
        data = OrderCreate(items=cart, payment={"method": "cash", "amount": "400"})
        order = checkout.create_order(data, cashier_user.id)
        assert order.tax_amount == Decimal("0")

    def test_walk_in_snapshot_without_customer(self, placed_order):
        assert placed_order.customer_id is None
        assert placed_order.customer_name == "Walk-in Customer"
        assert placed_order.customer_phone == ""
        assert placed_order.customer_display_name == "Walk-in Customer"

    def test_customer_snapshot_and_aggregates(self, db_session, checkout, cart, cashier_user, sample_customer):
        order = checkout.create_order(make_order_data(cart, customer=sample_customer.id), cashier_user.id)

        assert order.customer_name == "Jane Wanjiku"
        assert order.customer_phone == "+254700000001"
        assert order.customer_email == "jane@example.com"

        db_session.refresh(sample_customer)
        assert sample_customer.order_count == 1
        assert sample_customer.total_spent == Decimal("394.4")
        assert sample_customer.last_order_date is not None

    def test_request_customer_fields_win(self, checkout, cart, cashier_user, sample_customer):
        order = checkout.create_order(
            make_order_data(cart, customer=sample_customer.id, customer_name="Jane W."),
            cashier_user.id
        )
        assert order.customer_name == "Jane W."
        assert order.customer_phone == "+254700000001"

    def test_failure_after_insert_rolls_everything_back(self, db_session, checkout, cart, cashier_user,
                                                        sample_customer, coffee):
        with patch.object(CustomerStore, "record_order", side_effect=RuntimeError("customer store down")):
            with pytest.raises(InternalError):
                checkout.create_order(make_order_data(cart, customer=sample_customer.id), cashier_user.id)

        assert db_session.query(Order).count() == 0
        db_session.refresh(coffee)
        db_session.refresh(sample_customer)
        assert coffee.stock == 10
        assert sample_customer.order_count == 0

    def test_result_carries_staff_names(self, placed_order):
        assert placed_order.cashier_name == "Carl Cashier"
        assert placed_order.prepared_by_name is None


# ===== ORDER NUMBERS =====

class TestOrderNumbering:

    def test_format(self):
        assert format_order_number(datetime(2024, 1, 15, 9, 30), 1) == "ORD-20240115-0001"
        assert format_order_number(datetime(2024, 1, 15), 42) == "ORD-20240115-0042"

    def test_emergency_number_shape(self):
        number = emergency_order_number()
        assert number.startswith("ORD-EMG-")
        suffix = number[len("ORD-EMG-"):]
        assert len(suffix) == 11 and suffix.isdigit()

    def test_same_day_numbers_increase(self, checkout, coffee, cashier_user):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        first = checkout.create_order(make_order_data(items, amount="200"), cashier_user.id)
        second = checkout.create_order(make_order_data(items, amount="200"), cashier_user.id)

        today = datetime.now().strftime("%Y%m%d")
        assert first.order_number == f"ORD-{today}-0001"
        assert second.order_number == f"ORD-{today}-0002"

    def test_counting_failure_falls_back_to_emergency_number(self, db_session, checkout, coffee, cashier_user):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        with patch.object(OrderRepository, "count_created_between", side_effect=RuntimeError("count failed")):
            order = checkout.create_order(make_order_data(items, amount="200"), cashier_user.id)

        assert order.order_number.startswith("ORD-EMG-")
        assert db_session.query(Order).count() == 1

    def test_database_error_while_counting_keeps_checkout_alive(self, db_session, checkout, coffee, cashier_user):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        # no tax_rate: checkout writes the default settings row before numbering
        data = OrderCreate(items=items, payment={"method": "cash", "amount": "100"})
        failure = OperationalError("SELECT count(orders.id) FROM orders", {}, Exception("connection reset"))
        with patch.object(OrderRepository, "count_created_between", side_effect=failure):
            order = checkout.create_order(data, cashier_user.id)

        assert order.order_number.startswith("ORD-EMG-")
        assert db_session.query(Order).count() == 1
        assert db_session.query(Setting).count() == 1
        db_session.refresh(coffee)
        assert coffee.stock == 9

    def test_generator_counts_only_the_given_day(self, db_session, placed_order):
        generator = OrderNumberGenerator(db_session)
        assert generator.daily_count(datetime.now()) == 1
        assert generator.daily_count(datetime(2000, 1, 1)) == 0


# ===== LIFECYCLE =====

class TestOrderLifecycle:

    def test_cancel_paid_order_restores_stock(self, db_session, placed_order, coffee, tea):
        order = OrderLifecycleService(db_session).update_status(placed_order.id, "cancelled")

        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.REFUNDED
        assert order.payment.status == PaymentRecordStatus.REFUNDED
        db_session.refresh(coffee)
        db_session.refresh(tea)
        assert coffee.stock == 10
        assert tea.stock == 5

    def test_completing_cancelled_order_takes_stock_again(self, db_session, placed_order, coffee, tea):
        service = OrderLifecycleService(db_session)
        service.update_status(placed_order.id, "cancelled")
        order = service.update_status(placed_order.id, "completed")

        assert order.status == OrderStatus.COMPLETED
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment.status == PaymentRecordStatus.COMPLETED
        db_session.refresh(coffee)
        db_session.refresh(tea)
        assert coffee.stock == 7
        assert tea.stock == 4

    def test_reinstated_order_clamps_stock_at_zero(self, db_session, placed_order, coffee):
        service = OrderLifecycleService(db_session)
        service.update_status(placed_order.id, "cancelled")
        coffee.stock = 1
        db_session.commit()

        service.update_status(placed_order.id, "completed")
        db_session.refresh(coffee)
        assert coffee.stock == 0

    def test_staff_assignment(self, db_session, placed_order, manager_user):
        order = OrderLifecycleService(db_session).update_status(
            placed_order.id, "ready", prepared_by=manager_user.id, served_by=manager_user.id
        )
        assert order.status == OrderStatus.READY
        assert order.prepared_by_name == "Mary Manager"
        assert order.served_by_name == "Mary Manager"

    def test_unknown_staff_member_is_rejected(self, db_session, placed_order):
        with pytest.raises(NotFoundError):
            OrderLifecycleService(db_session).update_status(placed_order.id, "ready", prepared_by=uuid4())

    @pytest.mark.parametrize("status", ["shipped", "refunded", ""])
    def test_invalid_status_is_rejected(self, db_session, placed_order, status):
        with pytest.raises(InvalidStatusError) as exc:
            OrderLifecycleService(db_session).update_status(placed_order.id, status)
        assert exc.value.status_code == 400

    def test_unknown_order(self, db_session):
        with pytest.raises(NotFoundError):
            OrderLifecycleService(db_session).update_status(uuid4(), "ready")


class TestRefunds:

    def test_full_refund(self, db_session, placed_order, coffee):
        order = OrderLifecycleService(db_session).process_refund(placed_order.id, reason="Customer changed mind")

        assert order.status == OrderStatus.REFUNDED
        assert order.payment_status == PaymentStatus.REFUNDED
        assert order.payment.status == PaymentRecordStatus.REFUNDED
        assert order.notes == "Refund: Customer changed mind (394.40)"
        db_session.refresh(coffee)
        assert coffee.stock == 10

    def test_partial_refund_still_restores_stock(self, db_session, placed_order, tea):
        order = OrderLifecycleService(db_session).process_refund(placed_order.id, Decimal("100"), "Damaged")

        assert order.status == OrderStatus.REFUNDED
        assert order.payment_status == PaymentStatus.PARTIALLY_PAID
        db_session.refresh(tea)
        assert tea.stock == 5

    def test_refund_note_is_appended(self, checkout, db_session, cart, cashier_user):
        order = checkout.create_order(make_order_data(cart, notes="Gift wrap"), cashier_user.id)
        order = OrderLifecycleService(db_session).process_refund(order.id, Decimal("50"), "Late")
        assert order.notes == "Gift wrap\nRefund: Late (50.00)"

    def test_refund_cannot_exceed_total(self, db_session, placed_order):
        with pytest.raises(RefundExceedsTotalError):
            OrderLifecycleService(db_session).process_refund(placed_order.id, Decimal("394.41"))

    def test_only_paid_orders_are_refunded(self, db_session, placed_order):
        service = OrderLifecycleService(db_session)
        service.process_refund(placed_order.id)
        with pytest.raises(InvalidStateError):
            service.process_refund(placed_order.id)


# ===== QUERIES =====

class TestOrderQueries:

    def test_list_filters_and_pagination(self, db_session, checkout, coffee, cashier_user, sample_customer):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        for _ in range(3):
            checkout.create_order(make_order_data(items, amount="200"), cashier_user.id)
        checkout.create_order(make_order_data(items, amount="200", customer=sample_customer.id), cashier_user.id)

        queries = OrderQueryService(db_session)
        page = queries.list_orders(OrderFilters(), page=1, limit=3)
        assert page["pagination"] == {"current": 1, "pages": 2, "total": 4}
        assert len(page["orders"]) == 3

        found = queries.list_orders(OrderFilters(search="wanjiku"))
        assert [order.customer_name for order in found["orders"]] == ["Jane Wanjiku"]

        by_customer = queries.list_orders(OrderFilters(customer=sample_customer.id))
        assert by_customer["pagination"]["total"] == 1

    def test_search_treats_wildcards_literally(self, db_session, checkout, coffee, cashier_user):
        items = [{"product": coffee.id, "quantity": 1, "price": Decimal("100")}]
        for name in ("50% Club", "500 Club", "Tab_1", "Tab 1x"):
            checkout.create_order(make_order_data(items, amount="200", customer_name=name), cashier_user.id)

        queries = OrderQueryService(db_session)
        by_percent = queries.list_orders(OrderFilters(search="50%"))
        assert [order.customer_name for order in by_percent["orders"]] == ["50% Club"]

        by_underscore = queries.list_orders(OrderFilters(search="tab_"))
        assert [order.customer_name for order in by_underscore["orders"]] == ["Tab_1"]

    def test_orders_by_status(self, db_session, placed_order):
        queries = OrderQueryService(db_session)
        assert queries.get_orders_by_status("completed")["pagination"]["total"] == 1
        assert queries.get_orders_by_status("refunded")["pagination"]["total"] == 0
        with pytest.raises(InvalidStatusError):
            queries.get_orders_by_status("lost")

    def test_get_order_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            OrderQueryService(db_session).get_order(uuid4())

    def test_today_summary(self, db_session, checkout, cart, cashier_user):
        checkout.create_order(make_order_data(cart), cashier_user.id)
        checkout.create_order(make_order_data(cart, order_type="pickup"), cashier_user.id)

        summary = OrderQueryService(db_session).get_today_summary()
        assert summary["total_orders"] == 2
        assert summary["completed_orders"] == 1
        assert summary["pending_orders"] == 1
        assert summary["today_sales"] == Decimal("394.40")
        assert summary["today_order_count"] == 1

    def test_order_stats_for_today(self, db_session, placed_order):
        stats = OrderQueryService(db_session).get_order_stats("today")
        assert stats["sales"]["total_sales"] == Decimal("394.40")
        assert stats["sales"]["total_profit"] == Decimal("194.40")
        assert stats["sales"]["total_items"] == 2
        assert stats["by_payment"] == [{"method": "cash", "count": 1, "total_amount": Decimal("394.40")}]
        assert len(stats["hourly"]) == 1

    def test_empty_stats_average_is_zero(self, db_session):
        stats = OrderQueryService(db_session).get_order_stats("month")
        assert stats["sales"]["total_orders"] == 0
        assert stats["sales"]["average_order_value"] == Decimal("0")
        assert stats["hourly"] == []

    def test_custom_period(self):
        start, end, is_today = resolve_period("2024-01-01", "2024-01-31")
        assert start == datetime(2024, 1, 1)
        assert (end.year, end.month, end.day, end.hour) == (2024, 1, 31, 23)
        assert is_today is False

    def test_invalid_period(self):
        with pytest.raises(ValidationError):
            resolve_period("last-tuesday")


# ===== ENDPOINTS =====

class TestOrderEndpoints:

    @pytest.fixture
    def order_payload(self, coffee, tea):
        return {
            "items": [
                {"product": str(coffee.id), "quantity": 3, "price": 100},
                {"product": str(tea.id), "quantity": 1, "price": 50, "discount": 10},
            ],
            "tax_rate": 16,
            "payment_method": "cash",
            "payment_amount": 400,
        }

    def test_create_order(self, client, cashier_headers, order_payload):
        response = client.post("/api/orders/", json=order_payload, headers=cashier_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["statusCode"] == 201
        assert body["message"] == "Order created successfully"
        assert body["data"]["total_amount"] == pytest.approx(394.4)
        assert body["data"]["formatted_total"] == "KSh 394.40"
        assert body["data"]["cashier_name"] == "Carl Cashier"
        assert body["data"]["order_number"].startswith("ORD-")

    def test_create_order_error_envelope(self, client, cashier_headers, order_payload):
        order_payload["payment_amount"] = 300
        response = client.post("/api/orders/", json=order_payload, headers=cashier_headers)
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Payment amount (300) is less than total amount (394.40)",
            "statusCode": 400
        }

    def test_create_order_requires_token(self, client, order_payload):
        response = client.post("/api/orders/", json=order_payload)
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_cashier_cannot_change_status(self, client, cashier_headers, placed_order):
        response = client.patch(
            f"/api/orders/{placed_order.id}/status", json={"status": "ready"}, headers=cashier_headers
        )
        assert response.status_code == 403

    def test_manager_cancels_order(self, client, manager_headers, placed_order):
        response = client.patch(
            f"/api/orders/{placed_order.id}/status", json={"status": "cancelled"}, headers=manager_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["payment_status"] == "refunded"

    def test_refund_endpoint(self, client, manager_headers, placed_order):
        response = client.post(
            f"/api/orders/{placed_order.id}/refund",
            json={"refund_amount": 500, "reason": "Too much"},
            headers=manager_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Refund amount cannot exceed order total"

    def test_get_order(self, client, cashier_headers, placed_order):
        response = client.get(f"/api/orders/{placed_order.id}", headers=cashier_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(placed_order.id)

        missing = client.get(f"/api/orders/{uuid4()}", headers=cashier_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Order not found"

    def test_list_and_status_endpoints(self, client, cashier_headers, placed_order):
        listed = client.get("/api/orders/", params={"status": "completed"}, headers=cashier_headers)
        assert listed.json()["data"]["pagination"]["total"] == 1

        by_status = client.get("/api/orders/status/bogus", headers=cashier_headers)
        assert by_status.status_code == 400

    def test_today_summary_endpoint(self, client, cashier_headers, placed_order):
        response = client.get("/api/orders/today/summary", headers=cashier_headers)
        assert response.status_code == 200
        assert response.json()["data"]["total_orders"] == 1

    def test_stats_require_manager(self, client, cashier_headers, manager_headers, placed_order):
        assert client.get("/api/orders/stats/overview", headers=cashier_headers).status_code == 403
        response = client.get("/api/orders/stats/overview", params={"period": "today"}, headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["data"]["sales"]["total_orders"] == 1
