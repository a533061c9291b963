import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pos_api.database.database import get_db
from pos_api.common.money import CurrencyFormatter
from pos_api.common.responses import success_response
from pos_api.modules.auth.dependencies import get_current_user, require_admin
from pos_api.modules.auth.models import User
from .crud import SettingsStore
from .schemas import CurrencyUpdate, TaxUpdate, SettingOut

logger = logging.getLogger(__name__)

settings_router = APIRouter(prefix="/settings", tags=["Settings"])


def _settings_payload(store: SettingsStore) -> dict:
    return SettingOut.model_validate(store.get_settings()).model_dump()


@settings_router.get("/")
def get_settings(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return success_response(_settings_payload(SettingsStore(db)), "Settings retrieved successfully")


@settings_router.get("/currency")
def get_currency(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    currency = CurrencyFormatter(SettingsStore(db)).currency_info()
    return success_response(currency.as_dict(), "Currency settings retrieved successfully")


@settings_router.get("/currency/preview")
def preview_currency(
    amount: Decimal = Query(Decimal("1234.5"), description="Sample amount to format"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    formatter = CurrencyFormatter(SettingsStore(db))
    return success_response({
        "amount": amount,
        "formatted": formatter.format(amount),
        "without_symbol": formatter.format_without_symbol(amount),
        "currency": formatter.currency_info().as_dict()
    }, "Currency preview generated successfully")


@settings_router.patch("/currency")
def update_currency(
    currency_data: CurrencyUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    store = SettingsStore(db)
    store.update(currency_data.model_dump(exclude_unset=True))
    db.commit()
    logger.info(f"Currency settings updated by {current_user.email}")
    return success_response(CurrencyFormatter(store).currency_info().as_dict(), "Currency settings updated successfully")


@settings_router.patch("/tax")
def update_tax(
    tax_data: TaxUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    store = SettingsStore(db)
    store.update(tax_data.model_dump(exclude_unset=True))
    db.commit()
    logger.info(f"Tax settings updated by {current_user.email}")
    return success_response(store.get_tax_defaults(), "Tax settings updated successfully")
