"""
Currency presentation helpers.

Amounts are stored as plain decimals without currency-aware precision;
this table is only used to render them.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from pydantic import BaseModel


class CurrencyInfo(BaseModel):
    code: str
    name: str
    symbol: str


SUPPORTED_CURRENCIES: tuple[CurrencyInfo, ...] = (
    CurrencyInfo(code="USD", name="US Dollar", symbol="$"),
    CurrencyInfo(code="EUR", name="Euro", symbol="€"),
    CurrencyInfo(code="GBP", name="British Pound", symbol="£"),
    CurrencyInfo(code="JPY", name="Japanese Yen", symbol="¥"),
    CurrencyInfo(code="CNY", name="Chinese Yuan", symbol="¥"),
    CurrencyInfo(code="KRW", name="Korean Won", symbol="₩"),
    CurrencyInfo(code="INR", name="Indian Rupee", symbol="₹"),
    CurrencyInfo(code="VND", name="Vietnamese Dong", symbol="₫"),
    CurrencyInfo(code="BRL", name="Brazilian Real", symbol="R$"),
    CurrencyInfo(code="CAD", name="Canadian Dollar", symbol="C$"),
    CurrencyInfo(code="AUD", name="Australian Dollar", symbol="A$"),
    CurrencyInfo(code="MXN", name="Mexican Peso", symbol="MX$"),
)

CURRENCY_SYMBOLS: dict[str, str] = {c.code: c.symbol for c in SUPPORTED_CURRENCIES}


def is_supported_currency(code: str) -> bool:
    return code.upper() in CURRENCY_SYMBOLS


def currency_symbol(code: str) -> str:
    """Display symbol for a code; unknown codes render as '<CODE> '."""
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_currency(amount: Union[Decimal, float, int], currency: str = "USD") -> str:
    """
    Format an amount for display, always with two decimals.

    >>> format_currency(Decimal("12.5"), "EUR")
    '€12.50'
    >>> format_currency(3, "CHF")
    'CHF 3.00'
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency_symbol(currency)}{value}"
