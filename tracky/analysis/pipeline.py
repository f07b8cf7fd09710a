"""
End-to-end ledger analysis.

analyze_ledger() is the pure core: raw records, quotes and a rate table in,
positions, classified streams and the FIFO gains report out. refresh()
wraps it with the I/O collaborators (ledger source and price provider).
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Mapping, Optional

from tracky.analysis.classifier import ClassificationStats, classify_records
from tracky.analysis.fifo import FifoGainsEngine
from tracky.analysis.models import GainsReport
from tracky.analysis.positions import build_positions
from tracky.analysis.prices import PriceProvider, Quote, fetch_quotes, resolve_current_price
from tracky.core.config import GainsSettings
from tracky.core.models import (
    DividendRecord,
    FeeRecord,
    NormalizedTrade,
    Position,
    RawTransactionRecord,
)
from tracky.loaders.base import BaseLoader
from tracky.utils.currency import CurrencyNormalizer

logger = logging.getLogger(__name__)


@dataclass
class PortfolioResult:
    """Everything produced by one run of the pipeline."""

    as_of: date
    reporting_currency: str
    positions: list[Position] = field(default_factory=list)
    all_positions: dict[str, Position] = field(default_factory=dict)
    trades: list[NormalizedTrade] = field(default_factory=list)
    fees: list[FeeRecord] = field(default_factory=list)
    dividends: list[DividendRecord] = field(default_factory=list)
    gains: Optional[GainsReport] = None
    stats: ClassificationStats = field(default_factory=ClassificationStats)
    record_count: int = 0


def apply_quotes(positions: Iterable[Position], quotes: Mapping[str, Quote]) -> list[Position]:
    """Return copies of the positions with quote fields filled in."""
    quoted = []
    for position in positions:
        quote = quotes.get(position.symbol)
        if quote is not None and quote.is_usable:
            position = replace(
                position,
                current_price=quote.price,
                price_change_pct=quote.change_percent,
                price_currency=quote.currency or position.currency,
                price_source=quote.source or None,
            )
        quoted.append(position)
    return quoted


def analyze_ledger(
    records: Iterable[RawTransactionRecord],
    quotes: Optional[Mapping[str, Quote]] = None,
    normalizer: Optional[CurrencyNormalizer] = None,
    as_of: Optional[date] = None,
    settings: Optional[GainsSettings] = None,
    dropped_rows: int = 0,
) -> PortfolioResult:
    """
    Run classification, position building and FIFO matching on a full ledger.

    The result depends only on the arguments; calling it twice with the same
    input yields equal results.

    Args:
        records: Every raw record of the account, in any order.
        quotes: Symbol to current quote. Symbols without a usable quote are
            marked at their average cost.
        normalizer: Rate table into the reporting currency.
        as_of: Date used to age open lots. Defaults to today.
        settings: Gains engine settings.
        dropped_rows: Source rows the loader dropped for want of a date,
            reported as stats.undated.

    Returns:
        PortfolioResult for the ledger.
    """
    records = list(records)
    quotes = quotes or {}
    normalizer = normalizer or CurrencyNormalizer()
    as_of = as_of or date.today()

    ledger = classify_records(records)
    ledger.stats.undated = dropped_rows
    all_positions = build_positions(ledger.trades)
    open_positions = apply_quotes(
        (p for p in all_positions.values() if p.is_open),
        quotes,
    )

    current_prices = {
        p.symbol: resolve_current_price(p, quotes.get(p.symbol)) for p in open_positions
    }
    currencies = {symbol: p.currency for symbol, p in all_positions.items()}

    engine = FifoGainsEngine(normalizer, settings)
    gains = engine.compute(ledger.trades, current_prices, currencies, as_of)

    return PortfolioResult(
        as_of=as_of,
        reporting_currency=normalizer.reporting_currency,
        positions=open_positions,
        all_positions=all_positions,
        trades=ledger.trades,
        fees=ledger.fees,
        dividends=ledger.dividends,
        gains=gains,
        stats=ledger.stats,
        record_count=len(records),
    )


def refresh(
    loader: BaseLoader,
    provider: Optional[PriceProvider] = None,
    normalizer: Optional[CurrencyNormalizer] = None,
    as_of: Optional[date] = None,
    settings: Optional[GainsSettings] = None,
) -> PortfolioResult:
    """
    Fetch the full ledger, quote open positions, and analyse.

    Loader errors propagate unchanged: either the whole ledger is available
    and a full result is produced, or nothing is. The ledger is analysed a
    first time without quotes to learn which positions are open.

    Args:
        loader: Source of the raw ledger.
        provider: Price collaborator; None marks everything at average cost.
        normalizer: Rate table into the reporting currency.
        as_of: Date used to age open lots. Defaults to today.
        settings: Gains engine settings.

    Returns:
        PortfolioResult for the freshly fetched ledger.
    """
    records = loader.load()
    logger.info(f"Loaded {len(records)} records from {loader.source_name}")

    result = analyze_ledger(records, None, normalizer, as_of, settings, loader.dropped_rows)
    if provider is None or not result.positions:
        return result

    quotes = fetch_quotes(result.positions, provider)
    return analyze_ledger(records, quotes, normalizer, as_of, settings, loader.dropped_rows)
