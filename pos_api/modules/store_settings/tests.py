"""
Tests for store settings: currency, tax defaults and the admin endpoints
"""

import pytest
from decimal import Decimal

from pos_api.modules.store_settings.crud import SettingsStore
from pos_api.modules.store_settings.models import Setting


class TestSettingsStore:

    def test_defaults_are_created_once(self, db_session):
        store = SettingsStore(db_session)
        first = store.get_settings()
        second = store.get_settings()
        assert first.id == second.id
        assert first.currency_code == "KES"
        assert first.currency_symbol == "KSh"
        assert db_session.query(Setting).count() == 1

    def test_default_tax_rate_respects_enabled_flag(self, db_session):
        store = SettingsStore(db_session)
        store.update({"tax_rate": Decimal("16")})
        assert store.default_tax_rate() == Decimal("0")

        store.update({"tax_enabled": True})
        assert store.default_tax_rate() == Decimal("16")


class TestSettingsEndpoints:

    def test_full_settings_are_admin_only(self, client, admin_headers, manager_headers):
        assert client.get("/api/settings/", headers=manager_headers).status_code == 403
        response = client.get("/api/settings/", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["store_name"] == "My Store"

    def test_currency_is_readable_by_any_user(self, client, cashier_headers):
        response = client.get("/api/settings/currency", headers=cashier_headers)
        assert response.status_code == 200
        assert response.json()["data"]["symbol"] == "KSh"

    def test_currency_preview(self, client, cashier_headers):
        response = client.get(
            "/api/settings/currency/preview", params={"amount": "1234.5"}, headers=cashier_headers
        )
        data = response.json()["data"]
        assert data["formatted"] == "KSh 1,234.50"
        assert data["without_symbol"] == "1,234.50"

    def test_update_currency(self, client, admin_headers):
        response = client.patch(
            "/api/settings/currency",
            json={"currency_code": "USD", "currency_symbol": "$", "currency_position": "after"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["code"] == "USD"

        preview = client.get(
            "/api/settings/currency/preview", params={"amount": "10"}, headers=admin_headers
        )
        assert preview.json()["data"]["formatted"] == "10.00 $"

    def test_cashier_cannot_update_currency(self, client, cashier_headers):
        response = client.patch(
            "/api/settings/currency", json={"currency_symbol": "$"}, headers=cashier_headers
        )
        assert response.status_code == 403

    def test_tax_update_feeds_checkout(self, client, admin_headers, cashier_headers, coffee):
        response = client.patch(
            "/api/settings/tax", json={"tax_enabled": True, "tax_rate": 8}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["enabled"] is True

        order = client.post(
            "/api/orders/",
            json={
                "items": [{"product": str(coffee.id), "quantity": 1, "price": 100}],
                "payment": {"method": "cash", "amount": 200}
            },
            headers=cashier_headers
        )
        assert order.status_code == 201
        assert order.json()["data"]["tax_amount"] == pytest.approx(8.0)
        assert order.json()["data"]["total_amount"] == pytest.approx(108.0)
