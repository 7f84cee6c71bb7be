"""
Money formatting for notifications, advice prompts and stats.

Usage:
    from subtracker.utils.money import format_money

    format_money(1500)              -> "₹1,500"
    format_money(149.5, decimals=2) -> "₹149.50"
    format_money(10, "USD")         -> "10 USD"
"""
from decimal import Decimal

_CURRENCY_PREFIX = {
    "INR": "₹",
}


def currency_label(code: str) -> str:
    return _CURRENCY_PREFIX.get(code, code)


def format_money(amount, currency: str = "INR", decimals: int = 0) -> str:
    """
    Format an amount with thousands separators and the currency sign.

    Args:
        amount: int / float / Decimal / str
        currency: ISO code; INR renders as a ₹ prefix, others as an ISO suffix
        decimals: digits after the point
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    formatted = f"{{:,.{decimals}f}}".format(amount)
    if currency in _CURRENCY_PREFIX:
        return f"{currency_label(currency)}{formatted}"
    return f"{formatted} {currency}"


def format_money2(amount, currency: str = "INR") -> str:
    """Two decimal places (per-category breakdown)."""
    return format_money(amount, currency, decimals=2)
