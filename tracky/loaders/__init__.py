"""
Ledger sources: the hosted ledger store and delimited-text exports.
"""
from .base import (
    FIELD_ALIASES,
    BaseLoader,
    convert_rows,
    record_from_row,
    records_from_rows,
    resolve_aliases,
)
from .csv_loader import CsvLedgerLoader, read_delimited, read_rows
from .ledger_client import LedgerClient, LedgerLoader

__all__ = [
    "FIELD_ALIASES",
    "BaseLoader",
    "CsvLedgerLoader",
    "LedgerClient",
    "LedgerLoader",
    "convert_rows",
    "read_delimited",
    "read_rows",
    "record_from_row",
    "records_from_rows",
    "resolve_aliases",
]
