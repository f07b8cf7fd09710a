"""
Delimited-text ledger loader.

Reads ledger exports separated by commas or semicolons. Semicolon files
are read as comma-decimal ("12,50", "1.050,75") while still accepting plain
dot decimals ("150.25"); comma files infer the numeric locale per value.
"""
import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional, TextIO

import pandas as pd

from tracky.core.exceptions import LedgerFetchError
from tracky.core.models import RawTransactionRecord
from tracky.utils.helpers import find_csv_files
from .base import BaseLoader, convert_rows, records_from_rows


logger = logging.getLogger(__name__)


def detect_separator(header_line: str) -> str:
    """Return ";" if the header is semicolon-separated, else ","."""
    return ";" if header_line.count(";") > header_line.count(",") else ","


def read_rows(source: str | Path | TextIO) -> tuple[list[dict[str, Any]], Optional[bool]]:
    """
    Read the rows of one delimited ledger export.

    Args:
        source: Path to a file, or an open text buffer.

    Returns:
        Tuple of (rows keyed by trimmed column name, decimal-comma hint).

    Raises:
        LedgerFetchError: If the file cannot be read or parsed.
    """
    try:
        if isinstance(source, (str, Path)):
            text = Path(source).read_text(encoding="utf-8-sig")
        else:
            text = source.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LedgerFetchError(f"Could not read ledger export {source}: {e}") from e

    text = text.lstrip("\ufeff")
    if not text.strip():
        return [], None

    separator = detect_separator(text.splitlines()[0])

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=separator,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise LedgerFetchError(f"Could not parse ledger export {source}: {e}") from e

    df.columns = df.columns.str.strip()
    return df.to_dict(orient="records"), (True if separator == ";" else None)


def read_delimited(source: str | Path | TextIO) -> list[RawTransactionRecord]:
    """
    Read one delimited ledger export.

    Rows without a parseable date are dropped.

    Raises:
        LedgerFetchError: If the file cannot be read or parsed.
    """
    return records_from_rows(*read_rows(source))


class CsvLedgerLoader(BaseLoader):
    """Loader for a directory of delimited ledger exports."""

    source_name = "csv"

    def __init__(self, data_directory: Path, file_pattern: str = "*.csv"):
        """
        Initialise the loader.

        Args:
            data_directory: Path to directory containing ledger exports.
            file_pattern: Glob pattern to match export files.
        """
        self.data_directory = Path(data_directory)
        self.file_pattern = file_pattern
        logger.info(f"Initialised {self.__class__.__name__} with {self.data_directory}")

    def load(self) -> list[RawTransactionRecord]:
        """Load all records from every matching export file."""
        self.dropped_rows = 0
        csv_files = find_csv_files(self.data_directory, self.file_pattern)

        if not csv_files:
            logger.warning(f"No ledger exports found in {self.data_directory}")
            return []

        all_records: list[RawTransactionRecord] = []

        for csv_file in csv_files:
            logger.info(f"Loading ledger export: {csv_file.name}")
            records, dropped = convert_rows(*read_rows(csv_file))
            self.dropped_rows += dropped
            # Keep row order unique across files for stable date sorting
            offset = len(all_records)
            all_records.extend(
                replace(record, row_index=offset + i) for i, record in enumerate(records)
            )

        logger.info(f"Loaded {len(all_records)} ledger records from {len(csv_files)} files")
        return all_records
