"""Quantity parsing utilities for miles, gallons and money."""

from decimal import Decimal, InvalidOperation
import re


def parse_quantity(value_str: str) -> Decimal:
    """Parse a numeric quantity string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "1,234.5 mi" / "87.2 gal" (trailing unit)
    - "(123.45)" (negative in parentheses)

    Sign is preserved; rejecting negative quantities is left to the domain
    layer so the error names the offending record.

    Args:
        value_str: Quantity string

    Returns:
        Decimal quantity

    Raises:
        ValueError: If the string cannot be parsed
    """
    if not value_str or not value_str.strip():
        raise ValueError("Empty quantity string")

    value_str = value_str.strip()

    is_negative = False
    if value_str.startswith("(") and value_str.endswith(")"):
        is_negative = True
        value_str = value_str[1:-1]

    # Units and currency symbols
    value_str = re.sub(r"\s*(mi|miles|gal|gallons)\.?$", "", value_str, flags=re.IGNORECASE)
    value_str = re.sub(r"[$€£¥]", "", value_str)

    value_str = value_str.replace(",", "").strip()

    try:
        quantity = Decimal(value_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse quantity '{value_str}': {e!r}")
    if not quantity.is_finite():
        raise ValueError(f"Quantity must be a finite number, got '{value_str}'")
    return -quantity if is_negative else quantity
