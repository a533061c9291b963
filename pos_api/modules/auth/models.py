from pos_api.database.database import Base
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
from uuid import uuid4
from pos_api.common.mixins import TimestampMixin
import enum


class UserRole(enum.Enum):
    """Staff roles"""
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"


class User(Base, TimestampMixin):
    """
    Back-office staff.

    Cashiers ring up orders; managers handle status changes, refunds and
    reports; admins additionally manage store settings.
    """
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]),
                  nullable=False, default=UserRole.CASHIER)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)
