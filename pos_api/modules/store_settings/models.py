"""
Store settings

A single row holds the store profile together with the currency and tax
configuration consumed by checkout and money formatting.
"""

from pos_api.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, Numeric, Uuid
from uuid import uuid4
from pos_api.common.mixins import TimestampMixin


class Setting(Base, TimestampMixin):
    __tablename__ = "settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Store profile
    store_name = Column(String(100), nullable=False, default="My Store")
    store_phone = Column(String(30), nullable=True)
    store_email = Column(String(100), nullable=True)
    store_address = Column(String(255), nullable=True)
    country = Column(String(50), nullable=False, default="Kenya")

    # Currency
    currency_code = Column(String(3), nullable=False, default="KES")
    currency_symbol = Column(String(10), nullable=False, default="KSh")
    currency_position = Column(String(6), nullable=False, default="before")
    currency_decimals = Column(Integer, nullable=False, default=2)
    thousand_separator = Column(String(1), nullable=False, default=",")
    decimal_separator = Column(String(1), nullable=False, default=".")

    # Tax
    tax_enabled = Column(Boolean, nullable=False, default=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    tax_name = Column(String(20), nullable=False, default="VAT")
    tax_number = Column(String(50), nullable=True)
    tax_inclusive = Column(Boolean, nullable=False, default=False)

    # POS
    default_payment_method = Column(String(20), nullable=False, default="cash")
    low_stock_threshold = Column(Integer, nullable=False, default=10)
