"""
Weighted-average-cost position ledger.

Replays the trade stream in date order. Buys re-average the cost; sells
remove cost at the current average without changing it.
"""

import logging
from typing import Iterable

from tracky.core.models import Direction, NormalizedTrade, Position

logger = logging.getLogger(__name__)


def asset_class_for(asset_type: str) -> str:
    """Display class of an instrument from its ledger asset type."""
    return "ETF" if asset_type == "etf" else "Stock"


class PositionBuilder:
    """Maintains one Position per symbol while trades are applied in order."""

    def __init__(self):
        self.positions: dict[str, Position] = {}

    def _position_for(self, trade: NormalizedTrade) -> Position:
        position = self.positions.get(trade.symbol)
        if position is None:
            position = Position(
                symbol=trade.symbol,
                full_symbol=trade.full_symbol,
                currency=trade.currency,
                asset_class=asset_class_for(trade.asset_type),
                exchange=trade.exchange,
            )
            self.positions[trade.symbol] = position
        return position

    def apply(self, trade: NormalizedTrade) -> Position:
        """
        Apply one trade to its position.

        Args:
            trade: The trade to apply. Must not be earlier than any trade
                already applied for the same symbol.

        Returns:
            The updated position.
        """
        position = self._position_for(trade)

        if trade.direction is Direction.BUY:
            position.share_count += trade.share_count
            position.total_cost += trade.share_count * trade.unit_price
            position.average_cost = position.total_cost / position.share_count
            if position.first_acquisition_date is None:
                position.first_acquisition_date = trade.date
        else:
            if trade.share_count > position.share_count:
                logger.warning(
                    f"{trade.symbol}: SELL of {trade.share_count:.6f} on {trade.date} exceeds "
                    f"held {position.share_count:.6f}, clamping position to zero"
                )
            cost_removed = min(position.share_count, trade.share_count) * position.average_cost
            position.share_count = max(0.0, position.share_count - trade.share_count)
            position.total_cost = max(0.0, position.total_cost - cost_removed)

        return position

    def apply_all(self, trades: Iterable[NormalizedTrade]) -> dict[str, Position]:
        for trade in trades:
            self.apply(trade)
        return self.positions

    def open_positions(self) -> list[Position]:
        """Positions still holding more than dust, in first-trade order."""
        return [p for p in self.positions.values() if p.is_open]


def build_positions(trades: Iterable[NormalizedTrade]) -> dict[str, Position]:
    """
    Build every position touched by a date-ordered trade stream.

    Args:
        trades: Trades in ascending date order.

    Returns:
        Dict of symbol to Position, including fully closed positions.
    """
    builder = PositionBuilder()
    positions = builder.apply_all(trades)
    logger.info(
        f"Built {len(positions)} positions, {len(builder.open_positions())} open"
    )
    return positions


def open_positions(positions: dict[str, Position]) -> list[Position]:
    return [p for p in positions.values() if p.is_open]
