"""Display formatting for prices and quantities."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from babel.numbers import format_currency

DEFAULT_CURRENCY = "EUR"
DEFAULT_LOCALE = "nl_NL"


@lru_cache(maxsize=4096)
def _format_currency(value: Decimal, currency: str, locale: str) -> str:
    return format_currency(value, currency, locale=locale)


def format_money(
    value: Optional[Decimal],
    currency: str = DEFAULT_CURRENCY,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Locale-aware currency string. None renders as "" (never 0.00 or NaN)."""
    if value is None:
        return ""
    return _format_currency(value, currency, locale)


def format_qty(qty: Optional[Decimal]) -> str:
    """Quantity without trailing zeros, e.g. 5.000 -> "5"."""
    if qty is None:
        return ""
    if qty == qty.to_integral_value():
        return f"{qty:.0f}"
    return f"{qty.normalize():f}"
