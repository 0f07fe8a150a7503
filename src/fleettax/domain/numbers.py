"""Fixed-precision decimal helpers shared by the IFTA engine."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Quantization exponents
MILES = Decimal("0.001")
GALLONS = Decimal("0.001")
MONEY = Decimal("0.01")
MPG = Decimal("0.01")


def quantize(value: Decimal, exponent: Decimal) -> Decimal:
    """Round a decimal half-up to the given exponent."""
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal | None:
    """Convert a numeric value to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``.
    Returns None for values that are not finite numbers (including bools).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result
