"""
Utility functions for tracky.

Contains tolerant parsers for dates and numbers as they appear in ledger
exports. Parsers never raise: unparseable numbers become 0.0 and
unparseable dates become None.
"""
import logging
import math
import re
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Optional

import pandas as pd


logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMATS = [
    "%d/%m/%Y",           # 16/01/2023
    "%d-%m-%Y",           # 16-01-2023
    "%d.%m.%Y",           # 16.01.2023
    "%d %b %Y",           # 16 Jan 2023
    "%d/%m/%y %H:%M:%S",  # 16/01/23 15:30:45
    "%d/%m/%y",           # 16/01/23
]

_THOUSANDS_GROUPED = re.compile(r"^\d{1,3}(,\d{3})+$")
_DOT_THOUSANDS_GROUPED = re.compile(r"^\d{1,3}(\.\d{3})+$")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def as_datetime(value: date) -> datetime:
    """Naive UTC datetime for a date (midnight) or an aware/naive datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def parse_timestamp(
    value: Any,
    formats: Optional[list[str]] = None,
) -> Optional[datetime]:
    """
    Parse a date or timestamp into a naive UTC datetime.

    The given day-first formats are tried first, then anything pandas reads
    as a timestamp: ISO 8601 dates, Postgres timestamps ("+00" offsets,
    short fractional seconds) and "Z" suffixes. Offsets are converted to UTC.

    Args:
        value: The date string, date or datetime to parse.
        formats: List of date formats to try. Defaults to common European formats.

    Returns:
        Parsed datetime (midnight for date-only values) or None if parsing fails.
    """
    if _is_missing(value) or value == "":
        return None

    if isinstance(value, date):
        return as_datetime(value)

    value = str(value).strip()

    for fmt in formats or DEFAULT_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    try:
        parsed = pd.to_datetime(value, utc=True)
    except (ValueError, TypeError, OverflowError):
        parsed = None

    if parsed is None or pd.isna(parsed):
        logger.warning(f"Could not parse date: {value}")
        return None

    return parsed.tz_convert(None).to_pydatetime()


def parse_date(
    value: Any,
    formats: Optional[list[str]] = None,
) -> Optional[date]:
    """Parse a date or timestamp into a date object, or None."""
    parsed = parse_timestamp(value, formats)
    return parsed.date() if parsed else None


def parse_number(value: Any, decimal_comma: Optional[bool] = None) -> float:
    """
    Parse a numeric field, tolerating currency symbols and locale formats.

    Handles "1,234.56", "1.234,56", "12,5", "-€500", "(42.10)" and blanks.

    Args:
        value: The value to parse.
        decimal_comma: True if the source uses comma as decimal separator,
            False if it uses a dot, None to infer from the value itself.
            With True, a value without a comma whose dots are not
            thousands groups ("150.25") still reads as a dot decimal.

    Returns:
        Parsed float value, or 0.0 if parsing fails.
    """
    if _is_missing(value):
        return 0.0

    if isinstance(value, bool):
        return float(value)

    if isinstance(value, (int, float)):
        return float(value)

    value = str(value).strip()

    if value.lower() in ("", "n/a", "nan", "none", "null", "-"):
        return 0.0

    if not decimal_comma:
        try:
            return float(value)
        except ValueError:
            pass

    is_negative = value.startswith("-") or value.endswith("-") or (
        value.startswith("(") and value.endswith(")")
    )
    cleaned = re.sub(r"[£€$()\-+\s]", "", value)

    if decimal_comma is None:
        if "," in cleaned and "." in cleaned:
            decimal_comma = cleaned.rfind(",") > cleaned.rfind(".")
        elif "," in cleaned:
            decimal_comma = not _THOUSANDS_GROUPED.match(cleaned)
        else:
            decimal_comma = False
    elif "," not in cleaned and not _DOT_THOUSANDS_GROUPED.match(cleaned):
        # a comma-decimal source may still carry plain dot decimals
        decimal_comma = False

    if decimal_comma:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    try:
        result = float(cleaned)
    except ValueError:
        logger.debug(f"Could not parse number: {value!r}, using 0.0")
        return 0.0

    return -result if is_negative else result


def parse_text(value: Any) -> str:
    """Return a trimmed string, or "" for missing values."""
    if _is_missing(value):
        return ""
    return str(value).strip()


def find_csv_files(directory: Path, pattern: str) -> list[Path]:
    """
    Find CSV files in a directory matching a glob pattern.

    Args:
        directory: The directory to search.
        pattern: Glob pattern to match (e.g., "*.csv", "transactions*.csv").

    Returns:
        List of matching file paths, sorted by name.
    """
    if not directory.exists():
        logger.warning(f"Directory does not exist: {directory}")
        return []

    files = sorted(directory.glob(pattern))
    logger.debug(f"Found {len(files)} files matching '{pattern}' in {directory}")
    return files


def days_between(start: date, end: date) -> int:
    """
    Days from start to end, part days rounded up.

    Dates count from midnight, so two plain dates give their exact day
    difference; timestamps 365 days and a few hours apart give 366.
    """
    delta = as_datetime(end) - as_datetime(start)
    return math.ceil(delta.total_seconds() / 86400)
