"""
Money Utilities - Decimal operations for storefront prices.

Catalog prices arrive as decimal strings ("149.90"); everything is kept
as Decimal until it reaches a display or JSON boundary.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal, None]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

DEFAULT_CURRENCY = "TRY"

CURRENCY_SYMBOLS = {
    "TRY": "₺",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Via str to avoid binary float artifacts
            return Decimal(str(value))
        if isinstance(value, str):
            value = value.strip()
        result = Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")

    # NaN/Infinity never make sense as a price
    if not result.is_finite():
        return Decimal("0")
    return result


def round_money(value: Number) -> Decimal:
    """Round monetary value to two decimal places."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON responses.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Number, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: Currency code (TRY, USD, EUR, GBP)

    Returns:
        Formatted string, e.g. "₺1,250.00" or "12.50 CHF"
    """
    symbol = CURRENCY_SYMBOLS.get(currency)
    formatted = f"{round_money(value):,.2f}"
    if symbol is None:
        return f"{formatted} {currency}"
    return f"{symbol}{formatted}"
