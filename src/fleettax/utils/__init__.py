"""Utility functions for fleettax."""

from fleettax.utils.date_parser import parse_date, parse_quarter
from fleettax.utils.amount_parser import parse_quantity

__all__ = ["parse_date", "parse_quarter", "parse_quantity"]
