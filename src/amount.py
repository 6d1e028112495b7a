from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

from errors import AmountOutOfRangeError

# Amounts carry 4 decimal digits; internally they are integers scaled by 10^4.
SCALE = 10_000
_SCALE_DECIMAL = Decimal(SCALE)

# Largest magnitude whose scaled value fits a signed 64-bit integer
MAX_INTERNAL = 2**63 - 1
MAX_AMOUNT = Decimal(MAX_INTERNAL) / _SCALE_DECIMAL


def to_internal(value: Union[Decimal, int, str]) -> int:
    """
    Convert a decimal amount to the internal fixed-point integer.
    Ties round half away from zero (0.00005 -> 1, -0.00005 -> -1).

    Raises AmountOutOfRangeError for non-finite amounts and for amounts
    whose scaled value does not fit a signed 64-bit integer.
    """
    if not isinstance(value, Decimal):
        value = Decimal(value)
    if not value.is_finite() or value.copy_abs() > MAX_AMOUNT:
        raise AmountOutOfRangeError(f"amount {value} outside of ±{MAX_AMOUNT}")

    # Enough precision for the multiplication to be exact, so rounding happens once
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + 10)
        scaled = value * _SCALE_DECIMAL
        return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def to_decimal(value: int) -> Decimal:
    """Convert an internal fixed-point integer back to a decimal amount."""
    return Decimal(value) / _SCALE_DECIMAL


def format_amount(value: Decimal) -> str:
    """Render a decimal amount with trailing zeros removed, keeping at least one decimal place."""
    text = f"{value.normalize():f}"
    if "." not in text:
        text += ".0"
    return text
