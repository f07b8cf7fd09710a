"""
Base loader abstract class and the ledger field alias mapping.

Ledger sources name the same column differently ("price" vs
"price_per_unit", "side" vs "transaction_type"). The alias table is
resolved once per row here, so nothing downstream looks at raw keys.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional

from tracky.core.models import DEFAULT_CURRENCY, RawTransactionRecord
from tracky.utils.helpers import parse_number, parse_text, parse_timestamp


logger = logging.getLogger(__name__)


# Canonical field -> accepted source names, in priority order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": ("symbol",),
    "quantity": ("quantity",),
    "price_per_unit": ("price_per_unit", "price"),
    "asset_type": ("asset_type", "type"),
    "transaction_type": ("transaction_type", "side", "action"),
    "transaction_date": ("transaction_date", "date"),
    "currency": ("currency", "ccy"),
}


def resolve_aliases(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map a source row onto canonical field names.

    Keys are matched case-insensitively after trimming whitespace. When
    several aliases of one field are present, the first non-empty one in
    FIELD_ALIASES order wins.

    Args:
        row: A mapping of source column name to value.

    Returns:
        Dict keyed by canonical field name; absent fields are None.
    """
    normalised = {str(key).strip().lower(): value for key, value in row.items()}
    resolved: dict[str, Any] = {}

    for canonical, aliases in FIELD_ALIASES.items():
        resolved[canonical] = None
        for alias in aliases:
            value = normalised.get(alias)
            if parse_text(value) != "":
                resolved[canonical] = value
                break

    return resolved


def record_from_row(
    row: Mapping[str, Any],
    index: int = 0,
    decimal_comma: Optional[bool] = None,
) -> Optional[RawTransactionRecord]:
    """
    Convert one source row into a RawTransactionRecord.

    Args:
        row: A mapping of source column name to value.
        index: Position of the row in its source, kept for stable ordering.
        decimal_comma: Numeric locale hint passed to parse_number.

    Returns:
        RawTransactionRecord, or None if the row has no usable date.
    """
    fields = resolve_aliases(row)

    timestamp = parse_timestamp(fields["transaction_date"])
    if timestamp is None:
        logger.warning(f"Skipping ledger row {index}: no parseable transaction date")
        return None

    return RawTransactionRecord(
        symbol=parse_text(fields["symbol"]),
        asset_type=parse_text(fields["asset_type"]),
        transaction_type=parse_text(fields["transaction_type"]),
        quantity=parse_number(fields["quantity"], decimal_comma),
        price_per_unit=parse_number(fields["price_per_unit"], decimal_comma),
        currency=(parse_text(fields["currency"]) or DEFAULT_CURRENCY).upper(),
        transaction_date=timestamp.date(),
        row_index=index,
        timestamp=timestamp,
    )


def convert_rows(
    rows: Iterable[Mapping[str, Any]],
    decimal_comma: Optional[bool] = None,
) -> tuple[list[RawTransactionRecord], int]:
    """
    Convert source rows, dropping those without a usable date.

    Args:
        rows: Source rows in source order.
        decimal_comma: Numeric locale hint passed to parse_number.

    Returns:
        Tuple of (records, number of rows dropped for want of a date).
    """
    records = []
    dropped = 0
    for index, row in enumerate(rows):
        record = record_from_row(row, index, decimal_comma)
        if record:
            records.append(record)
        else:
            dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} ledger rows without a parseable transaction date")
    return records, dropped


def records_from_rows(
    rows: Iterable[Mapping[str, Any]],
    decimal_comma: Optional[bool] = None,
) -> list[RawTransactionRecord]:
    """Convert source rows, dropping those without a usable date."""
    records, _ = convert_rows(rows, decimal_comma)
    return records


class BaseLoader(ABC):
    """Abstract base class for ledger sources."""

    source_name: str = "ledger"
    # Rows the last load() dropped because they had no parseable date
    dropped_rows: int = 0

    @abstractmethod
    def load(self) -> list[RawTransactionRecord]:
        """
        Load every raw transaction record from the source.

        Returns:
            List of RawTransactionRecord objects, in source order.

        Raises:
            ConfigurationError: If the source is not configured or unreachable.
            LedgerFetchError: If the source could not be read as a whole.
        """
        pass
