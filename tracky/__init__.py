"""
tracky

Turns a raw investment ledger into current positions, classified fee and
dividend streams, and FIFO realized/unrealized gains in one reporting
currency.

Example usage:
    from tracky import Config, CsvLedgerLoader, CurrencyNormalizer, refresh

    config = Config.from_yaml("config.yaml")
    loader = CsvLedgerLoader("./data")
    result = refresh(loader, normalizer=CurrencyNormalizer.from_config(config.reporting))
    print(result.gains.total)
"""

from tracky.analysis import (
    FifoGainsEngine,
    GainsReport,
    PortfolioResult,
    PositionBuilder,
    analyze_ledger,
    classify_records,
    refresh,
)
from tracky.core import (
    Config,
    ConfigurationError,
    LedgerFetchError,
    MatchingError,
    Position,
    RawTransactionRecord,
    TrackyError,
)
from tracky.loaders import CsvLedgerLoader, LedgerClient, LedgerLoader
from tracky.utils import CurrencyNormalizer

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigurationError",
    "CsvLedgerLoader",
    "CurrencyNormalizer",
    "FifoGainsEngine",
    "GainsReport",
    "LedgerClient",
    "LedgerFetchError",
    "LedgerLoader",
    "MatchingError",
    "PortfolioResult",
    "Position",
    "PositionBuilder",
    "RawTransactionRecord",
    "TrackyError",
    "analyze_ledger",
    "classify_records",
    "refresh",
]
