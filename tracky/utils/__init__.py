"""
Utility functions for tracky.
"""
from .currency import CurrencyNormalizer
from .helpers import (
    days_between,
    find_csv_files,
    parse_date,
    parse_number,
    parse_text,
    parse_timestamp,
)

__all__ = [
    "CurrencyNormalizer",
    "days_between",
    "find_csv_files",
    "parse_date",
    "parse_number",
    "parse_text",
    "parse_timestamp",
]
