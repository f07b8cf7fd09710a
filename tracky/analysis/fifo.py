"""
Realized and unrealized gains using FIFO tax-lot matching.

Each buy opens a lot; each sell drains the oldest open lots first. Sales
and remaining lots are bucketed into short- and long-term holdings, and
every amount is normalised into the reporting currency before it is
accumulated.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Mapping, Optional

from tracky.analysis.models import (
    GainsReport,
    HoldingTerm,
    SaleResult,
    SellMatch,
    SymbolGains,
    TaxLot,
)
from tracky.core.config import GainsSettings
from tracky.core.exceptions import MatchingError
from tracky.core.models import (
    CURRENCY_EPSILON,
    SHARE_EPSILON,
    HoldingPeriodMethod,
    NormalizedTrade,
)
from tracky.utils.currency import CurrencyNormalizer
from tracky.utils.helpers import days_between

logger = logging.getLogger(__name__)


def _snap(amount: float) -> float:
    """Drop floating-point dust below one thousandth of a currency unit."""
    return 0.0 if abs(amount) < CURRENCY_EPSILON else amount


def group_trades_by_symbol(
    trades: Iterable[NormalizedTrade],
) -> dict[str, list[NormalizedTrade]]:
    """Group trades per symbol in first-seen order, each list sorted by execution time."""
    grouped: dict[str, list[NormalizedTrade]] = defaultdict(list)
    for trade in trades:
        grouped[trade.symbol].append(trade)
    return {symbol: sorted(txs, key=lambda t: t.occurred_at) for symbol, txs in grouped.items()}


class FifoGainsEngine:
    """Computes FIFO gains per symbol and for the whole portfolio."""

    def __init__(
        self,
        normalizer: Optional[CurrencyNormalizer] = None,
        settings: Optional[GainsSettings] = None,
    ):
        """
        Initialise the engine.

        Args:
            normalizer: Converts trade-currency amounts to the reporting currency.
            settings: Holding-period threshold, bucketing method and strictness.
        """
        self.normalizer = normalizer or CurrencyNormalizer()
        self.settings = settings or GainsSettings()

    def _term(self, days: int) -> HoldingTerm:
        return HoldingTerm.from_days(days, self.settings.long_term_days)

    def _match_sale(
        self,
        trade: NormalizedTrade,
        lots: list[TaxLot],
        currency: str,
    ) -> SaleResult:
        """Drain the lot queue for one sell and price the result."""
        to_sell = trade.share_count
        matches: list[SellMatch] = []

        for lot in lots:
            if to_sell <= SHARE_EPSILON:
                break
            if lot.is_exhausted:
                continue

            consumed = lot.consume(to_sell)
            to_sell -= consumed
            holding_days = days_between(lot.held_since, trade.occurred_at)
            matches.append(
                SellMatch(
                    symbol=trade.symbol,
                    sell_date=trade.date,
                    matched_share_count=consumed,
                    lot_date=lot.acquisition_date,
                    lot_unit_cost=lot.unit_cost,
                    sell_price=trade.unit_price,
                    holding_days=holding_days,
                    term=self._term(holding_days),
                )
            )

        unmatched = to_sell if to_sell > SHARE_EPSILON else 0.0
        if unmatched:
            if self.settings.strict_matching:
                raise MatchingError(trade.symbol, trade.date, unmatched)
            logger.warning(
                f"{trade.symbol}: SELL on {trade.date} has {unmatched:.6f} shares "
                f"with no matching BUY lots"
            )

        proceeds = trade.share_count * trade.unit_price
        cost_basis = sum(m.cost_basis for m in matches)
        realized = self.normalizer.convert(proceeds - cost_basis, currency)

        # The sale's age is taken from the oldest lot it consumed
        holding_days = matches[0].holding_days if matches else 0
        term = self._term(holding_days)

        short_gain = long_gain = 0.0
        if self.settings.holding_period_method is HoldingPeriodMethod.PER_LOT:
            for match in matches:
                gain = self.normalizer.convert(match.proceeds - match.cost_basis, currency)
                if match.term is HoldingTerm.LONG_TERM:
                    long_gain += gain
                else:
                    short_gain += gain
            # Shares with no lot have no holding period
            short_gain += self.normalizer.convert(unmatched * trade.unit_price, currency)
        elif term is HoldingTerm.LONG_TERM:
            long_gain = realized
        else:
            short_gain = realized

        return SaleResult(
            symbol=trade.symbol,
            sell_date=trade.date,
            share_count=trade.share_count,
            unit_price=trade.unit_price,
            currency=currency,
            proceeds=proceeds,
            cost_basis=cost_basis,
            realized_gain=realized,
            holding_days=holding_days,
            term=term,
            short_term_gain=short_gain,
            long_term_gain=long_gain,
            unmatched_share_count=unmatched,
            matches=matches,
        )

    def compute_symbol(
        self,
        symbol: str,
        trades: list[NormalizedTrade],
        current_price: Optional[float],
        currency: str,
        as_of: Optional[date] = None,
    ) -> SymbolGains:
        """
        Replay one symbol's trades against a fresh FIFO lot queue.

        Args:
            symbol: Clean symbol of the instrument.
            trades: The symbol's trades in ascending date order.
            current_price: Price to mark remaining lots at, in the instrument
                currency. None or non-positive falls back to the remaining
                lots' average cost.
            currency: Instrument currency.
            as_of: Date used to age remaining lots. Defaults to today.

        Returns:
            SymbolGains with reporting-currency totals and the sale audit trail.
        """
        as_of = as_of or date.today()
        convert = self.normalizer.convert
        gains = SymbolGains(symbol=symbol, currency=currency)
        lots: list[TaxLot] = []

        for trade in trades:
            if trade.is_buy:
                lots.append(
                    TaxLot(
                        acquisition_date=trade.date,
                        original_share_count=trade.share_count,
                        remaining_share_count=trade.share_count,
                        unit_cost=trade.unit_price,
                        acquired_at=trade.timestamp,
                    )
                )
                gains.buy_count += 1
                continue

            sale = self._match_sale(trade, lots, currency)
            gains.sales.append(sale)
            gains.sell_count += 1
            gains.realized += sale.realized_gain
            gains.proceeds += convert(sale.proceeds, currency)
            gains.cost_basis_sold += convert(sale.cost_basis, currency)
            gains.short_realized += sale.short_term_gain
            gains.long_realized += sale.long_term_gain
            gains.unmatched_shares += sale.unmatched_share_count

        open_lots = [lot for lot in lots if not lot.is_exhausted]
        remaining_shares = sum(lot.remaining_share_count for lot in open_lots)
        remaining_cost = sum(lot.remaining_cost for lot in open_lots)

        if current_price is None or current_price <= 0:
            current_price = remaining_cost / remaining_shares if remaining_shares else 0.0
            logger.debug(f"{symbol}: no current price, marking lots at cost {current_price:.4f}")

        for lot in open_lots:
            unrealized = convert(lot.remaining_share_count * (current_price - lot.unit_cost), currency)
            if self._term(days_between(lot.held_since, as_of)) is HoldingTerm.LONG_TERM:
                gains.long_unrealized += unrealized
            else:
                gains.short_unrealized += unrealized

        gains.lots = lots
        gains.current_price = current_price
        gains.remaining_shares = remaining_shares if remaining_shares > SHARE_EPSILON else 0.0
        gains.remaining_cost = _snap(convert(remaining_cost, currency))
        gains.current_value = _snap(convert(remaining_shares * current_price, currency))
        gains.unrealized = _snap(convert(remaining_shares * current_price - remaining_cost, currency))
        gains.realized = _snap(gains.realized)
        gains.proceeds = _snap(gains.proceeds)
        gains.cost_basis_sold = _snap(gains.cost_basis_sold)

        return gains

    def compute(
        self,
        trades: Iterable[NormalizedTrade],
        current_prices: Optional[Mapping[str, float]] = None,
        currencies: Optional[Mapping[str, str]] = None,
        as_of: Optional[date] = None,
    ) -> GainsReport:
        """
        Compute FIFO gains for every symbol in a trade stream.

        Args:
            trades: Trades for any number of symbols, in ascending date order.
            current_prices: Symbol to current price in the instrument currency.
            currencies: Symbol to instrument currency; defaults to the
                currency of the symbol's first trade.
            as_of: Date used to age remaining lots. Defaults to today.

        Returns:
            GainsReport with per-symbol results and portfolio totals.
        """
        current_prices = current_prices or {}
        currencies = currencies or {}
        as_of = as_of or date.today()

        report = GainsReport(reporting_currency=self.normalizer.reporting_currency)
        grouped = group_trades_by_symbol(trades)
        logger.info(f"Computing FIFO gains for {len(grouped)} symbols as of {as_of}")

        for symbol, symbol_trades in grouped.items():
            currency = currencies.get(symbol) or symbol_trades[0].currency
            gains = self.compute_symbol(
                symbol,
                symbol_trades,
                current_prices.get(symbol),
                currency,
                as_of,
            )
            report.by_symbol.append(gains)
            report.realized += gains.realized
            report.unrealized += gains.unrealized
            report.proceeds += gains.proceeds
            report.cost_basis_sold += gains.cost_basis_sold
            report.short_realized += gains.short_realized
            report.long_realized += gains.long_realized
            report.short_unrealized += gains.short_unrealized
            report.long_unrealized += gains.long_unrealized

        for name in (
            "realized", "unrealized", "proceeds", "cost_basis_sold",
            "short_realized", "long_realized", "short_unrealized", "long_unrealized",
        ):
            setattr(report, name, _snap(getattr(report, name)))

        unmatched = report.unmatched_sales
        if unmatched:
            logger.warning(f"Found {len(unmatched)} sells exceeding available lots")
        logger.info(
            f"Realized {report.realized:,.2f} {report.reporting_currency}, "
            f"unrealized {report.unrealized:,.2f} {report.reporting_currency}"
        )
        return report
