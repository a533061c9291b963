"""
Tests for shared helpers: money, currency formatting and the unit of work
"""

import pytest
from decimal import Decimal

from pos_api.common.money import (
    CurrencyFormat, CurrencyFormatter, DEFAULT_CURRENCY_FORMAT,
    to_money, percent_of, safe_divide, profit_margin
)
from pos_api.common.responses import success_response
from pos_api.common.unit_of_work import SqlAlchemyUnitOfWork
from pos_api.modules.categories.models import Category


class StaticSource:
    def __init__(self, currency):
        self.currency = currency

    def get_currency_format(self):
        return self.currency


class BrokenSource:
    def get_currency_format(self):
        raise RuntimeError("settings table missing")


class TestMoney:

    def test_to_money_rounds_half_up(self):
        assert to_money("2.345") == Decimal("2.35")
        assert to_money(None) == Decimal("0.00")
        assert to_money(0.1 + 0.2) == Decimal("0.30")

    def test_percent_of(self):
        assert percent_of(Decimal("340"), Decimal("16")) == Decimal("54.40")

    def test_safe_divide(self):
        assert safe_divide(10, 0) == Decimal("0")
        assert safe_divide(10, 4) == Decimal("2.5")

    def test_profit_margin(self):
        assert profit_margin(Decimal("0"), Decimal("10")) == Decimal("0")
        assert profit_margin(Decimal("200"), Decimal("150")) == Decimal("25.00")

    def test_invalid_amount(self):
        with pytest.raises(ValueError):
            to_money("abc")


class TestCurrencyFormatter:

    def test_default_format(self):
        formatter = CurrencyFormatter()
        assert formatter.format(Decimal("1234.5")) == "KSh 1,234.50"
        assert formatter.format(Decimal("1234567")) == "KSh 1,234,567.00"
        assert formatter.format_without_symbol(Decimal("-5")) == "-5.00"

    def test_symbol_after_and_custom_separators(self):
        currency = CurrencyFormat(code="EUR", symbol="€", position="after",
                                  thousand_separator=".", decimal_separator=",")
        formatter = CurrencyFormatter(StaticSource(currency))
        assert formatter.format(Decimal("1234.5")) == "1.234,50 €"

    def test_zero_decimals(self):
        formatter = CurrencyFormatter(StaticSource(CurrencyFormat(code="UGX", symbol="USh", decimals=0)))
        assert formatter.format(Decimal("25000.6")) == "USh 25,001"

    def test_unreadable_settings_fall_back_to_defaults(self):
        formatter = CurrencyFormatter(BrokenSource())
        assert formatter.currency_info() == DEFAULT_CURRENCY_FORMAT
        assert formatter.format(10) == "KSh 10.00"


class TestResponses:

    def test_success_envelope(self):
        assert success_response({"id": 1}, "Created", 201) == {
            "success": True, "message": "Created", "data": {"id": 1}, "statusCode": 201
        }

    def test_success_defaults(self):
        assert success_response() == {"success": True, "message": "Success", "data": None, "statusCode": 200}


class TestUnitOfWork:

    def test_changes_without_commit_are_rolled_back(self, db_session):
        with SqlAlchemyUnitOfWork(db_session) as uow:
            uow.db.add(Category(name="Snacks"))
            uow.db.flush()
        assert db_session.query(Category).count() == 0

    def test_exception_rolls_back(self, db_session):
        with pytest.raises(RuntimeError):
            with SqlAlchemyUnitOfWork(db_session) as uow:
                uow.db.add(Category(name="Snacks"))
                uow.db.flush()
                raise RuntimeError("boom")
        assert db_session.query(Category).count() == 0

    def test_commit_persists(self, db_session):
        with SqlAlchemyUnitOfWork(db_session) as uow:
            uow.db.add(Category(name="Snacks"))
            uow.commit()
        assert db_session.query(Category).count() == 1


class TestApplication:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_request_validation_envelope(self, client, cashier_headers):
        response = client.post("/api/orders/", json={"items": "nope"}, headers=cashier_headers)
        assert response.status_code == 422
        assert response.json()["success"] is False
