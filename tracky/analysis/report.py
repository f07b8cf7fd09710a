"""
Report tables and summary figures for a PortfolioResult.

Everything returned here is plain data (dicts and DataFrames) in the
reporting currency; rendering is left to the consumer.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from tracky.analysis.pipeline import PortfolioResult
from tracky.core.models import DividendRecord, FeeRecord, FeeType, NormalizedTrade, Position
from tracky.utils.currency import CurrencyNormalizer

logger = logging.getLogger(__name__)


@dataclass
class PortfolioMetrics:
    """Headline figures for open positions."""

    market_value: float
    cost: float

    @property
    def gain(self) -> float:
        return self.market_value - self.cost

    @property
    def gain_percentage(self) -> float:
        if self.cost == 0:
            return 0.0
        return (self.gain / self.cost) * 100


def portfolio_metrics(
    positions: Iterable[Position],
    normalizer: CurrencyNormalizer,
) -> PortfolioMetrics:
    """Market value and cost of open positions in the reporting currency."""
    value = cost = 0.0
    for p in positions:
        value += normalizer.convert(p.market_value, p.currency)
        cost += normalizer.convert(p.cost_value, p.currency)
    return PortfolioMetrics(market_value=value, cost=cost)


def allocation_by_type(
    positions: Iterable[Position],
    normalizer: CurrencyNormalizer,
) -> pd.DataFrame:
    """Market value and share of the portfolio per asset class."""
    by_type: dict[str, float] = defaultdict(float)
    for p in positions:
        by_type[p.asset_class] += normalizer.convert(p.market_value, p.currency)

    if not by_type:
        return pd.DataFrame(columns=["type", "value", "pct"])

    total = sum(by_type.values())
    return pd.DataFrame(
        [
            {"type": t, "value": v, "pct": (v / total) * 100 if total > 0 else 0.0}
            for t, v in by_type.items()
        ]
    )


def yearly_performance(
    trades: Iterable[NormalizedTrade],
    normalizer: CurrencyNormalizer,
) -> pd.DataFrame:
    """
    Money invested and withdrawn through trades, per calendar year.

    Args:
        trades: Trades of any symbols.
        normalizer: Rate table into the reporting currency.

    Returns:
        DataFrame indexed by year with invested, proceeds, trades, buys, sells.
    """
    columns = ["invested", "proceeds", "trades", "buys", "sells"]
    rows = []
    for t in trades:
        value = normalizer.convert(t.value, t.currency)
        rows.append(
            {
                "year": t.date.year,
                "invested": value if t.is_buy else 0.0,
                "proceeds": value if t.is_sell else 0.0,
                "trades": 1,
                "buys": int(t.is_buy),
                "sells": int(t.is_sell),
            }
        )

    if not rows:
        return pd.DataFrame(columns=columns).rename_axis("year")

    return pd.DataFrame(rows).groupby("year")[columns].sum().sort_index(ascending=False)


def dividends_by_year(
    dividends: Iterable[DividendRecord],
    normalizer: CurrencyNormalizer,
) -> pd.Series:
    """Dividend income per calendar year, most recent first."""
    totals: dict[int, float] = defaultdict(float)
    for d in dividends:
        totals[d.date.year] += normalizer.convert(d.amount, d.currency)
    series = pd.Series(totals, dtype=float, name="amount").rename_axis("year")
    return series.sort_index(ascending=False)


def fee_totals(
    fees: Iterable[FeeRecord],
    normalizer: CurrencyNormalizer,
) -> dict[str, float]:
    """Total of each fee type, every type present even if zero."""
    totals = {str(fee_type): 0.0 for fee_type in FeeType}
    for f in fees:
        totals[str(f.fee_type)] += normalizer.convert(f.amount, f.currency)
    return totals


def total_dividends(dividends: Iterable[DividendRecord], normalizer: CurrencyNormalizer) -> float:
    return sum(normalizer.convert(d.amount, d.currency) for d in dividends)


def records_frame(records: Iterable, sort_by: str = "date", ascending: bool = False) -> pd.DataFrame:
    """DataFrame of any records exposing to_dict(), newest first by default."""
    rows = [r.to_dict() for r in records]
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    if sort_by in df.columns:
        df = df.sort_values(sort_by, ascending=ascending, kind="stable").reset_index(drop=True)
    return df


def positions_frame(positions: Iterable[Position], normalizer: CurrencyNormalizer) -> pd.DataFrame:
    """Open positions ordered by reporting-currency market value."""
    rows = []
    for p in positions:
        row = p.to_dict()
        row["market_value_reporting"] = normalizer.convert(p.market_value, p.currency)
        rows.append(row)
    if not rows:
        return pd.DataFrame()
    return (
        pd.DataFrame(rows)
        .sort_values("market_value_reporting", ascending=False, kind="stable")
        .reset_index(drop=True)
    )


def gains_frame(result: PortfolioResult) -> pd.DataFrame:
    """Per-symbol FIFO gains ordered by absolute total gain."""
    if result.gains is None or not result.gains.by_symbol:
        return pd.DataFrame()
    df = pd.DataFrame([g.to_dict() for g in result.gains.by_symbol])
    order = df["total"].abs().sort_values(ascending=False, kind="stable").index
    return df.loc[order].reset_index(drop=True)


def summarize(result: PortfolioResult, normalizer: CurrencyNormalizer) -> dict:
    """
    Headline summary of a pipeline run.

    Args:
        result: Output of analyze_ledger or refresh.
        normalizer: The same rate table the result was computed with.

    Returns:
        Dict of plain values, suitable for printing or serialising.
    """
    metrics = portfolio_metrics(result.positions, normalizer)
    fees = fee_totals(result.fees, normalizer)
    gains = result.gains

    summary = {
        "as_of": result.as_of.isoformat(),
        "reporting_currency": result.reporting_currency,
        "records": result.record_count,
        "open_positions": len(result.positions),
        "trades": len(result.trades),
        "market_value": metrics.market_value,
        "cost": metrics.cost,
        "unrealized_gain": metrics.gain,
        "unrealized_gain_pct": metrics.gain_percentage,
        "fees": fees,
        "total_fees": sum(fees.values()),
        "total_dividends": total_dividends(result.dividends, normalizer),
        "stats": result.stats.to_dict(),
        "undated_rows": result.stats.undated,
    }
    if gains is not None:
        summary["gains"] = {
            key: value for key, value in gains.to_dict().items() if key != "by_symbol"
        }
        summary["unmatched_sales"] = len(gains.unmatched_sales)

    logger.debug(f"Summary built for {summary['open_positions']} open positions")
    return summary
