"""
Pydantic schemas for the orders module

Checkout accepts the payment either as a nested ``payment`` object or as
flat ``payment_method`` / ``payment_amount`` / ``transaction_id`` fields.
Both are folded into ``OrderCreate.payment`` before reaching the service.
"""

from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional, List, Any, Dict
from uuid import UUID
from datetime import datetime

from .models import OrderStatus, PaymentStatus, PaymentRecordStatus, PaymentMethod, OrderType


# ===== INPUT =====

class PaymentIntent(BaseModel):
    """Canonical payment tendered at checkout"""
    method: Optional[PaymentMethod] = Field(None, description="Payment method")
    amount: Optional[Decimal] = Field(None, ge=0, description="Amount tendered")
    transaction_id: Optional[str] = Field(None, max_length=100, description="External transaction reference")


class OrderItemCreate(BaseModel):
    """Cart line. Price and discount come from the caller"""
    product: UUID = Field(..., description="Product ID")
    quantity: int = Field(..., ge=1, description="Quantity")
    price: Decimal = Field(..., ge=0, description="Unit price charged")
    discount: Decimal = Field(default=Decimal("0"), ge=0, description="Discount for the whole line")


class DeliveryAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class OrderCreate(BaseModel):
    """Checkout request"""
    customer: Optional[UUID] = Field(None, description="Customer ID")
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=30)
    customer_email: Optional[str] = Field(None, max_length=100)
    items: List[OrderItemCreate] = Field(default_factory=list, description="Cart lines")
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, description="Explicit tax; 0 means compute it")
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    shipping_amount: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100, description="Percent; defaults to store tax settings")
    is_taxable: bool = True
    notes: Optional[str] = Field(None, max_length=500)
    order_type: OrderType = OrderType.WALK_IN
    table_number: Optional[str] = Field(None, max_length=20)
    delivery_address: Optional[DeliveryAddress] = None
    branch: Optional[str] = Field(None, max_length=50)
    payment: PaymentIntent = Field(default_factory=PaymentIntent)

    @model_validator(mode="before")
    @classmethod
    def normalize_payment(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        payment = dict(data.get("payment") or {})
        flat_fields = {
            "method": data.pop("payment_method", None),
            "amount": data.pop("payment_amount", None),
            "transaction_id": data.pop("transaction_id", None),
        }
        for key, value in flat_fields.items():
            if not payment.get(key) and value is not None:
                payment[key] = value
        data["payment"] = payment
        return data


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., description="Target status")
    prepared_by: Optional[UUID] = None
    served_by: Optional[UUID] = None


class RefundRequest(BaseModel):
    refund_amount: Optional[Decimal] = Field(None, gt=0, description="Defaults to the order total")
    reason: Optional[str] = Field(None, max_length=200)


# ===== OUTPUT =====

class OrderItemOut(BaseModel):
    product_id: UUID
    name: str
    sku: str
    price: Decimal
    cost: Decimal
    quantity: int
    discount: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


class PaymentOut(BaseModel):
    method: PaymentMethod
    amount: Decimal
    transaction_id: Optional[str] = None
    status: PaymentRecordStatus
    paid_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OrderOut(BaseModel):
    id: UUID
    order_number: str
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    items: List[OrderItemOut] = []
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    total_cost: Decimal
    tax_rate: Decimal
    is_taxable: bool
    status: OrderStatus
    payment_status: PaymentStatus
    payment: Optional[PaymentOut] = None
    notes: Optional[str] = None
    order_type: OrderType
    table_number: Optional[str] = None
    delivery_address: Optional[Dict[str, Any]] = None
    branch: Optional[str] = None
    cashier_id: UUID
    prepared_by_id: Optional[UUID] = None
    served_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    # Derived
    profit: Decimal
    profit_margin: Decimal
    item_count: int
    customer_display_name: Optional[str] = None
    cashier_name: Optional[str] = None
    prepared_by_name: Optional[str] = None
    served_by_name: Optional[str] = None
    formatted_total: Optional[str] = None

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    current: int
    pages: int
    total: int


class OrderList(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination
