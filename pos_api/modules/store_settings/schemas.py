from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, Literal
from uuid import UUID


class CurrencyUpdate(BaseModel):
    currency_code: Optional[str] = Field(None, min_length=3, max_length=3)
    currency_symbol: Optional[str] = Field(None, min_length=1, max_length=10)
    currency_position: Optional[Literal["before", "after"]] = None
    currency_decimals: Optional[int] = Field(None, ge=0, le=4)
    thousand_separator: Optional[str] = Field(None, max_length=1)
    decimal_separator: Optional[str] = Field(None, min_length=1, max_length=1)


class TaxUpdate(BaseModel):
    tax_enabled: Optional[bool] = None
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    tax_name: Optional[str] = Field(None, max_length=20)
    tax_number: Optional[str] = Field(None, max_length=50)
    tax_inclusive: Optional[bool] = None


class SettingOut(BaseModel):
    id: UUID
    store_name: str
    store_phone: Optional[str] = None
    store_email: Optional[str] = None
    store_address: Optional[str] = None
    country: str
    currency_code: str
    currency_symbol: str
    currency_position: str
    currency_decimals: int
    thousand_separator: str
    decimal_separator: str
    tax_enabled: bool
    tax_rate: Decimal
    tax_name: str
    tax_number: Optional[str] = None
    tax_inclusive: bool
    default_payment_method: str
    low_stock_threshold: int

    model_config = {"from_attributes": True}
