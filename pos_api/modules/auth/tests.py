"""
Tests for the auth module: login, token resolution and role checks
"""

import pytest
from datetime import timedelta

from pos_api.common.exceptions import AuthenticationError
from pos_api.modules.auth.service import AuthService
from pos_api.modules.auth.utils import (
    hash_password, verify_password, create_access_token, verify_token
)


class TestPasswordsAndTokens:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)
        assert not verify_password("s3cret!", "")

    def test_token_round_trip(self):
        payload = verify_token(create_access_token({"sub": "abc"}))
        assert payload["sub"] == "abc"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError) as exc:
            verify_token(token)
        assert exc.value.message == "Token expired"

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            verify_token("not-a-jwt")


class TestLogin:

    def test_login_updates_last_login(self, db_session, cashier_user):
        result = AuthService(db_session).login("Cashier@MyStore.co.ke", "secret123")
        assert result.user.email == "cashier@mystore.co.ke"
        assert result.token_type == "bearer"
        db_session.refresh(cashier_user)
        assert cashier_user.last_login is not None

    def test_wrong_password(self, db_session, cashier_user):
        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("cashier@mystore.co.ke", "nope")
        assert exc.value.message == "Invalid credentials"

    def test_deactivated_account(self, db_session, cashier_user):
        cashier_user.is_active = False
        db_session.commit()
        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("cashier@mystore.co.ke", "secret123")
        assert exc.value.message == "Account is deactivated"


class TestAuthEndpoints:

    def test_login_endpoint(self, client, manager_user):
        response = client.post(
            "/api/auth/login", json={"email": "manager@mystore.co.ke", "password": "secret123"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["role"] == "manager"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Mary Manager"

    def test_login_failure_envelope(self, client, manager_user):
        response = client.post(
            "/api/auth/login", json={"email": "manager@mystore.co.ke", "password": "wrong"}
        )
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials", "statusCode": 401}

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    def test_deactivated_user_token_is_rejected(self, client, db_session, cashier_user, cashier_headers):
        cashier_user.is_active = False
        db_session.commit()
        response = client.get("/api/auth/me", headers=cashier_headers)
        assert response.status_code == 401

    def test_admin_passes_manager_routes(self, client, admin_headers):
        response = client.get("/api/orders/reports/types", headers=admin_headers)
        assert response.status_code == 200
