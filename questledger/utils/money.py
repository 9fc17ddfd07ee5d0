"""
Money helpers for the whole project.

Usage:
    from questledger.utils.money import to_decimal, format_money

    to_decimal("1500")          -> Decimal("1500")
    to_decimal("1,500.25")      -> Decimal("1500.25")
    format_money(15000, "PHP")  -> "15,000.00 PHP"
"""
from decimal import Decimal, InvalidOperation

# Suffix shown after amounts; other currencies use their ISO code
_CURRENCY_SUFFIX = {
    "PHP": "PHP",
    "USD": "USD",
    "EUR": "EUR",
}


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount typed by a user: commas are thousands separators
    (en-PH style) and are dropped.

    Example:
        >>> normalize_decimal_input("1,500.25")
        '1500.25'
    """
    return value.strip().replace(",", "")


def to_decimal(value, default: Decimal = Decimal("0")) -> Decimal:
    """
    Coerce a persisted or user-supplied amount to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1. ``None`` and unparseable
    input yield ``default``.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    try:
        return Decimal(normalize_decimal_input(str(value)))
    except InvalidOperation:
        return default


def currency_label(code: str) -> str:
    return _CURRENCY_SUFFIX.get(code, code)


def format_money(amount, currency: str = "PHP", decimals: int = 2) -> str:
    """
    Format an amount with thousands separators and the currency suffix.

    Args:
        amount: int / float / Decimal / str
        currency: ISO currency code (PHP, USD, EUR)
        decimals: digits after the decimal point

    Returns:
        "15,000.00 PHP"
    """
    amount = to_decimal(amount)
    fmt = f"{{:,.{decimals}f}}"
    return f"{fmt.format(amount)} {currency_label(currency)}"
