"""Decimal helpers shared by the pricing and commission calculators"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional

WHOLE = Decimal("1")
CENT = Decimal("0.01")

# Largest amount, rate or distance accepted from config and forms
MAX_VALUE = Decimal("1000000000")


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a config/form value to Decimal.

    Returns None for anything that is not a finite number (None, '', 'abc',
    NaN, Infinity, booleans) and for magnitudes above MAX_VALUE. Floats go
    through str() so 17.5 stays 17.5.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip().replace('$', '').replace(',', ''))
        except (InvalidOperation, ValueError, TypeError):
            return None
    if not result.is_finite() or abs(result) > MAX_VALUE:
        return None
    return result


def positive_or_none(value: Any) -> Optional[Decimal]:
    """Return value as a positive Decimal, or None when absent/malformed."""
    amount = to_decimal(value)
    if amount is None or amount <= 0:
        return None
    return amount


def round_whole(amount: Decimal) -> Decimal:
    """Round to whole currency units, half-up."""
    return amount.quantize(WHOLE, rounding=ROUND_HALF_UP)


def round_cents(amount: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_discount(amount: Decimal, rate: Decimal) -> Decimal:
    """Discounted amount for one line, rounded at the line boundary."""
    return round_whole(amount * (Decimal("1") - rate))


def format_money(amount: Optional[Decimal]) -> str:
    if amount is None:
        return "$..."
    return f"${round_cents(amount):,.2f}"
