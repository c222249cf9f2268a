"""
Fixed-precision money helpers.

All currency amounts are Decimal with two fractional digits. Floats are
accepted from JSON input but converted through str() so 0.3 stays 0.30
instead of picking up binary noise.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Matches Numeric(12, 2) columns
MAX_AMOUNT = Decimal("9999999999.99")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value, field: str = "amount", *, allow_zero: bool = True) -> Decimal:
    """Coerce JSON/user input to a 2dp Decimal, raising ValidationError on junk."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a decimal amount")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a decimal amount")
    else:
        raise ValidationError(f"{field} must be a decimal amount")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a decimal amount")

    amount = quantize(amount)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if not allow_zero and amount == ZERO:
        raise ValidationError(f"{field} must be > 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT}")
    return amount


def format_money(value) -> str | None:
    """Serialize a money value as a fixed 2dp string ("0.60")."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return str(quantize(value))
