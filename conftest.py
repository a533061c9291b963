"""
Shared pytest fixtures

Tests run against an in-memory SQLite database shared through a StaticPool;
every test gets freshly created tables.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from pos_api.main import app
from pos_api.database.database import Base, SessionLocal, engine, get_db
from pos_api.modules.auth.models import User, UserRole
from pos_api.modules.auth.utils import hash_password, create_access_token
from pos_api.modules.categories.models import Category
from pos_api.modules.products.models import Product
from pos_api.modules.customers.models import Customer, CustomerType

TEST_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ===== USERS =====

def _create_user(db_session, name: str, email: str, role: UserRole) -> User:
    user = User(name=name, email=email, password=hash_password(TEST_PASSWORD), role=role)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session):
    return _create_user(db_session, "Alice Admin", "admin@mystore.co.ke", UserRole.ADMIN)


@pytest.fixture
def manager_user(db_session):
    return _create_user(db_session, "Mary Manager", "manager@mystore.co.ke", UserRole.MANAGER)


@pytest.fixture
def cashier_user(db_session):
    return _create_user(db_session, "Carl Cashier", "cashier@mystore.co.ke", UserRole.CASHIER)


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return _auth_headers(manager_user)


@pytest.fixture
def cashier_headers(cashier_user):
    return _auth_headers(cashier_user)


# ===== CATALOG AND CUSTOMERS =====

@pytest.fixture
def sample_category(db_session):
    category = Category(name="Beverages")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def _create_product(db_session, **values) -> Product:
    product = Product(**values)
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def coffee(db_session, sample_category):
    return _create_product(
        db_session, name="Coffee Beans", sku="COF-001", category_id=sample_category.id,
        price=Decimal("100.00"), cost=Decimal("60.00"), stock=10, low_stock_alert=3
    )


@pytest.fixture
def tea(db_session, sample_category):
    return _create_product(
        db_session, name="Green Tea", sku="TEA-001", category_id=sample_category.id,
        price=Decimal("50.00"), cost=Decimal("20.00"), stock=5, low_stock_alert=5
    )


@pytest.fixture
def delivery_fee(db_session):
    return _create_product(
        db_session, name="Delivery Fee", sku="SRV-001",
        price=Decimal("80.00"), cost=Decimal("0.00"), stock=0, track_inventory=False
    )


@pytest.fixture
def discontinued(db_session):
    return _create_product(
        db_session, name="Old Mug", sku="MUG-001",
        price=Decimal("30.00"), cost=Decimal("10.00"), stock=4, is_active=False
    )


@pytest.fixture
def sample_customer(db_session):
    customer = Customer(
        name="Jane Wanjiku", phone="+254700000001", email="jane@example.com",
        customer_type=CustomerType.VIP, loyalty_points=15
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer
