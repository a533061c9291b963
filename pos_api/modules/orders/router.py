from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import datetime

from pos_api.core.config import settings
from pos_api.database.database import get_db
from pos_api.common.money import CurrencyFormatter
from pos_api.common.responses import success_response
from pos_api.modules.auth.dependencies import get_current_user, require_cashier, require_manager
from pos_api.modules.auth.models import User
from pos_api.modules.store_settings.crud import SettingsStore
from .lifecycle import OrderLifecycleService
from .models import OrderStatus, PaymentStatus, OrderType
from .queries import OrderQueryService, OrderFilters
from .schemas import OrderCreate, OrderStatusUpdate, RefundRequest
from .service import CheckoutService, serialize_order

orders_router = APIRouter(prefix="/orders", tags=["Orders"])


def _formatter(db: Session) -> CurrencyFormatter:
    return CurrencyFormatter(SettingsStore(db))


def _order_page(result: dict, db: Session) -> dict:
    formatter = _formatter(db)
    return {
        "orders": [serialize_order(order, formatter) for order in result["orders"]],
        "pagination": result["pagination"]
    }


@orders_router.post("/", status_code=status.HTTP_201_CREATED)
def create_order(
    order_data: OrderCreate,
    current_user: User = Depends(require_cashier),
    db: Session = Depends(get_db)
):
    """
    Checkout: validate the cart, capture the payment and persist the order.
    """
    order = CheckoutService(db).create_order(order_data, current_user.id)
    return success_response(
        serialize_order(order, _formatter(db)),
        "Order created successfully",
        status.HTTP_201_CREATED
    )


@orders_router.get("/today/summary")
def get_today_summary(
    current_user: User = Depends(require_cashier),
    db: Session = Depends(get_db)
):
    summary = OrderQueryService(db).get_today_summary()
    return success_response(summary, "Today's summary retrieved successfully")


@orders_router.get("/stats/overview")
def get_order_stats(
    period: str = Query("today", description="today, week, month, year or an ISO start date"),
    end_date: Optional[str] = Query(None, description="End date for a custom period"),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    stats = OrderQueryService(db).get_order_stats(period, end_date)
    return success_response(stats, "Order statistics retrieved successfully")


@orders_router.get("/status/{order_status}")
def get_orders_by_status(
    order_status: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    result = OrderQueryService(db).get_orders_by_status(order_status, page, limit)
    return success_response(_order_page(result, db), f"Orders with status {order_status} retrieved successfully")


@orders_router.get("/")
def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None),
    order_type: Optional[OrderType] = Query(None),
    customer: Optional[UUID] = Query(None),
    cashier: Optional[UUID] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Order number, customer name or phone"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    filters = OrderFilters(
        status=order_status,
        payment_status=payment_status,
        order_type=order_type,
        customer=customer,
        cashier=cashier,
        start_date=start_date,
        end_date=end_date,
        search=search
    )
    result = OrderQueryService(db).list_orders(filters, page, limit)
    return success_response(_order_page(result, db), "Orders retrieved successfully")


@orders_router.get("/{order_id}")
def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    order = OrderQueryService(db).get_order(order_id)
    return success_response(serialize_order(order, _formatter(db)), "Order retrieved successfully")


@orders_router.patch("/{order_id}/status")
def update_order_status(
    order_id: UUID,
    update_data: OrderStatusUpdate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    order = OrderLifecycleService(db).update_status(
        order_id, update_data.status, update_data.prepared_by, update_data.served_by
    )
    return success_response(serialize_order(order, _formatter(db)), "Order status updated successfully")


@orders_router.post("/{order_id}/refund")
def process_refund(
    order_id: UUID,
    refund_data: RefundRequest,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    order = OrderLifecycleService(db).process_refund(order_id, refund_data.refund_amount, refund_data.reason)
    return success_response(serialize_order(order, _formatter(db)), "Refund processed successfully")
