"""
Utils package
"""

from .dates import add_months, format_month, month_floor, parse_month
from .money import to_money

__all__ = [
    "add_months",
    "format_month",
    "month_floor",
    "parse_month",
    "to_money",
]
