"""
Settings store: currency and tax configuration.
"""
import logging
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from pos_api.common.money import CurrencyFormat, to_decimal
from pos_api.core.config import settings as app_settings
from .models import Setting

logger = logging.getLogger(__name__)


class SettingsStore:

    def __init__(self, db: Session):
        self.db = db

    def get_settings(self) -> Setting:
        """Return the settings row, creating the defaults on first use"""
        setting = self.db.query(Setting).order_by(Setting.created_at).first()
        if setting is None:
            setting = Setting(
                currency_code=app_settings.DEFAULT_CURRENCY_CODE,
                currency_symbol=app_settings.DEFAULT_CURRENCY_SYMBOL,
                low_stock_threshold=app_settings.LOW_STOCK_DEFAULT
            )
            self.db.add(setting)
            self.db.flush()
            logger.info("Created default store settings")
        return setting

    def get_currency_format(self) -> CurrencyFormat:
        setting = self.get_settings()
        return CurrencyFormat(
            code=setting.currency_code,
            symbol=setting.currency_symbol,
            position=setting.currency_position,
            decimals=setting.currency_decimals,
            thousand_separator=setting.thousand_separator,
            decimal_separator=setting.decimal_separator
        )

    def get_tax_defaults(self) -> Dict[str, Any]:
        setting = self.get_settings()
        return {
            "enabled": setting.tax_enabled,
            "rate": to_decimal(setting.tax_rate),
            "inclusive": setting.tax_inclusive,
            "name": setting.tax_name
        }

    def default_tax_rate(self) -> Decimal:
        """Rate applied when a checkout does not specify one"""
        defaults = self.get_tax_defaults()
        return defaults["rate"] if defaults["enabled"] else Decimal("0")

    def update(self, values: Dict[str, Any]) -> Setting:
        setting = self.get_settings()
        for field, value in values.items():
            setattr(setting, field, value)
        self.db.flush()
        return setting
