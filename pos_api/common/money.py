"""
Money helpers and currency formatting.

All amounts are ``Decimal``. Formatting is driven by the store's currency
settings and falls back to Kenyan shillings when they cannot be read.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Convert numbers (including floats coming back from SQLite) to Decimal"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")


def to_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Any, rate: Any) -> Decimal:
    """amount * rate / 100, rounded to cents"""
    return to_money(to_decimal(amount) * to_decimal(rate) / HUNDRED)


def safe_divide(numerator: Any, denominator: Any) -> Decimal:
    denominator = to_decimal(denominator)
    if denominator == 0:
        return ZERO
    return to_decimal(numerator) / denominator


def profit_margin(revenue: Any, cost: Any) -> Decimal:
    """Profit as a percentage of revenue; 0 when there is no revenue"""
    revenue = to_decimal(revenue)
    if revenue == 0:
        return ZERO
    return to_money((revenue - to_decimal(cost)) / revenue * HUNDRED)


@dataclass(frozen=True)
class CurrencyFormat:
    code: str = "KES"
    symbol: str = "KSh"
    position: str = "before"
    decimals: int = 2
    thousand_separator: str = ","
    decimal_separator: str = "."

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "symbol": self.symbol,
            "position": self.position,
            "decimals": self.decimals,
            "thousand_separator": self.thousand_separator,
            "decimal_separator": self.decimal_separator,
        }


DEFAULT_CURRENCY_FORMAT = CurrencyFormat()


class CurrencySource(Protocol):
    def get_currency_format(self) -> CurrencyFormat: ...


class CurrencyFormatter:
    """Formats amounts using the currency configured in the store settings"""

    def __init__(self, source: Optional[CurrencySource] = None):
        self.source = source

    def currency_info(self) -> CurrencyFormat:
        if self.source is None:
            return DEFAULT_CURRENCY_FORMAT
        try:
            return self.source.get_currency_format()
        except Exception as e:
            logger.warning(f"Currency settings unavailable, using defaults: {e}")
            return DEFAULT_CURRENCY_FORMAT

    def format_without_symbol(self, amount: Any) -> str:
        return self._format_number(amount, self.currency_info())

    def format(self, amount: Any) -> str:
        currency = self.currency_info()
        number = self._format_number(amount, currency)
        if currency.position == "after":
            return f"{number} {currency.symbol}"
        return f"{currency.symbol} {number}"

    @staticmethod
    def _format_number(amount: Any, currency: CurrencyFormat) -> str:
        quantum = Decimal(1).scaleb(-currency.decimals)
        value = to_decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        integer_part, _, fraction = f"{abs(value):f}".partition(".")

        groups = []
        while len(integer_part) > 3:
            groups.insert(0, integer_part[-3:])
            integer_part = integer_part[:-3]
        groups.insert(0, integer_part)
        number = currency.thousand_separator.join(groups)

        if currency.decimals > 0:
            number = f"{number}{currency.decimal_separator}{fraction}"
        return f"{sign}{number}"
