"""
Money helpers.

Parsing and rounding of currency amounts and percentages.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rewards_engine.config.constants import MONEY_QUANT


def round_money(value: Decimal) -> Decimal:
    """
    Round amount to two decimal places, half up.

    Args:
        value: Amount

    Returns:
        Rounded amount
    """
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def to_decimal(value, default: Decimal = Decimal("0")) -> Decimal:
    """
    Convert a stored option or column value to Decimal.

    Non-numeric, empty and non-finite values give ``default``.

    Args:
        value: Raw value (str, int, float, Decimal or None)
        default: Value used when conversion fails

    Returns:
        Decimal value
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Rounded ``percent`` % of ``amount``."""
    return round_money(amount * percent / Decimal("100"))
