"""
Core types, configuration and errors for tracky.
"""
from .config import Config, GainsSettings, load_config
from .exceptions import ConfigurationError, LedgerFetchError, MatchingError, TrackyError
from .models import (
    Direction,
    DividendRecord,
    FeeRecord,
    FeeType,
    HoldingPeriodMethod,
    NormalizedTrade,
    Position,
    RawTransactionRecord,
    RecordKind,
)

__all__ = [
    "Config",
    "ConfigurationError",
    "Direction",
    "DividendRecord",
    "FeeRecord",
    "FeeType",
    "GainsSettings",
    "HoldingPeriodMethod",
    "LedgerFetchError",
    "MatchingError",
    "NormalizedTrade",
    "Position",
    "RawTransactionRecord",
    "RecordKind",
    "TrackyError",
    "load_config",
]
