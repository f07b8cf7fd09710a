"""
Data models for gains analysis.

Contains tax lots, the lot-match audit records, and the per-symbol and
portfolio-level gains results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from tracky.core.models import SHARE_EPSILON


class HoldingTerm(Enum):
    """Tax holding-period buckets."""

    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"

    @classmethod
    def from_days(cls, days: int, long_term_days: int = 365) -> "HoldingTerm":
        """Long-term requires strictly more than long_term_days."""
        if days > long_term_days:
            return cls.LONG_TERM
        return cls.SHORT_TERM

    @property
    def label(self) -> str:
        labels = {
            self.SHORT_TERM: "Short-term",
            self.LONG_TERM: "Long-term",
        }
        return labels[self]


@dataclass
class TaxLot:
    """
    A single acquisition lot for FIFO tracking.

    remaining_share_count only ever decreases; a drained lot stays in the
    queue and is skipped.
    """

    acquisition_date: date
    original_share_count: float
    remaining_share_count: float
    unit_cost: float
    acquired_at: Optional[datetime] = None

    @property
    def held_since(self) -> date:
        """Acquisition timestamp if known, otherwise the acquisition date."""
        return self.acquired_at or self.acquisition_date

    @property
    def is_exhausted(self) -> bool:
        """Returns True if all shares have been sold."""
        return self.remaining_share_count <= SHARE_EPSILON

    @property
    def remaining_cost(self) -> float:
        return self.remaining_share_count * self.unit_cost

    def consume(self, shares_to_sell: float) -> float:
        """
        Consume shares from this lot.

        Args:
            shares_to_sell: Number of shares to consume.

        Returns:
            Number of shares actually consumed (may be less if lot exhausted).
        """
        consumed = min(shares_to_sell, self.remaining_share_count)
        self.remaining_share_count = max(0.0, self.remaining_share_count - consumed)
        return consumed


@dataclass(frozen=True)
class SellMatch:
    """Audit record: one slice of a sale matched against one lot."""

    symbol: str
    sell_date: date
    matched_share_count: float
    lot_date: date
    lot_unit_cost: float
    sell_price: float
    holding_days: int
    term: HoldingTerm

    @property
    def cost_basis(self) -> float:
        return self.matched_share_count * self.lot_unit_cost

    @property
    def proceeds(self) -> float:
        return self.matched_share_count * self.sell_price

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "sell_date": self.sell_date.isoformat(),
            "lot_date": self.lot_date.isoformat(),
            "shares": self.matched_share_count,
            "lot_unit_cost": self.lot_unit_cost,
            "sell_price": self.sell_price,
            "holding_days": self.holding_days,
            "term": self.term.value,
        }


@dataclass
class SaleResult:
    """
    Result of matching one sell trade against the lot queue.

    Native amounts are in the trade currency; realized_gain and the term
    buckets are in the reporting currency.
    """

    symbol: str
    sell_date: date
    share_count: float
    unit_price: float
    currency: str
    proceeds: float
    cost_basis: float
    realized_gain: float
    holding_days: int
    term: HoldingTerm
    short_term_gain: float = 0.0
    long_term_gain: float = 0.0
    unmatched_share_count: float = 0.0
    matches: list[SellMatch] = field(default_factory=list)

    @property
    def is_unmatched(self) -> bool:
        """True if part of the sale found no open lot to match."""
        return self.unmatched_share_count > SHARE_EPSILON

    @property
    def matched_share_count(self) -> float:
        return sum(m.matched_share_count for m in self.matches)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "sell_date": self.sell_date.isoformat(),
            "shares": self.share_count,
            "price": self.unit_price,
            "currency": self.currency,
            "proceeds": self.proceeds,
            "cost_basis": self.cost_basis,
            "realized_gain": self.realized_gain,
            "holding_days": self.holding_days,
            "term": self.term.value,
            "unmatched_shares": self.unmatched_share_count,
        }


@dataclass
class SymbolGains:
    """
    FIFO gains for one instrument.

    Money totals are in the reporting currency. current_price stays in the
    instrument currency.
    """

    symbol: str
    currency: str
    realized: float = 0.0
    unrealized: float = 0.0
    proceeds: float = 0.0
    cost_basis_sold: float = 0.0
    sell_count: int = 0
    buy_count: int = 0
    remaining_shares: float = 0.0
    remaining_cost: float = 0.0
    current_value: float = 0.0
    current_price: float = 0.0
    unmatched_shares: float = 0.0
    short_realized: float = 0.0
    long_realized: float = 0.0
    short_unrealized: float = 0.0
    long_unrealized: float = 0.0
    lots: list[TaxLot] = field(default_factory=list)
    sales: list[SaleResult] = field(default_factory=list)

    @property
    def total(self) -> float:
        return self.realized + self.unrealized

    @property
    def fully_sold(self) -> bool:
        return self.remaining_shares <= SHARE_EPSILON

    @property
    def open_lots(self) -> list[TaxLot]:
        return [lot for lot in self.lots if not lot.is_exhausted]

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "currency": self.currency,
            "realized": self.realized,
            "unrealized": self.unrealized,
            "total": self.total,
            "proceeds": self.proceeds,
            "cost_basis_sold": self.cost_basis_sold,
            "sell_count": self.sell_count,
            "buy_count": self.buy_count,
            "remaining_shares": self.remaining_shares,
            "remaining_cost": self.remaining_cost,
            "current_value": self.current_value,
            "fully_sold": self.fully_sold,
            "unmatched_shares": self.unmatched_shares,
        }


@dataclass
class GainsReport:
    """Portfolio-level FIFO gains, in the reporting currency."""

    reporting_currency: str
    by_symbol: list[SymbolGains] = field(default_factory=list)
    realized: float = 0.0
    unrealized: float = 0.0
    proceeds: float = 0.0
    cost_basis_sold: float = 0.0
    short_realized: float = 0.0
    long_realized: float = 0.0
    short_unrealized: float = 0.0
    long_unrealized: float = 0.0

    @property
    def total(self) -> float:
        return self.realized + self.unrealized

    @property
    def sales(self) -> list[SaleResult]:
        return [sale for gains in self.by_symbol for sale in gains.sales]

    @property
    def matches(self) -> list[SellMatch]:
        """Full audit trail of lot-match decisions, in replay order per symbol."""
        return [match for sale in self.sales for match in sale.matches]

    @property
    def unmatched_sales(self) -> list[SaleResult]:
        return [sale for sale in self.sales if sale.is_unmatched]

    @property
    def symbols_with_sells(self) -> list[SymbolGains]:
        return [g for g in self.by_symbol if g.sell_count > 0]

    def for_symbol(self, symbol: str) -> SymbolGains | None:
        for gains in self.by_symbol:
            if gains.symbol == symbol:
                return gains
        return None

    def to_dict(self) -> dict:
        return {
            "reporting_currency": self.reporting_currency,
            "realized": self.realized,
            "unrealized": self.unrealized,
            "total": self.total,
            "proceeds": self.proceeds,
            "cost_basis_sold": self.cost_basis_sold,
            "short_realized": self.short_realized,
            "long_realized": self.long_realized,
            "short_unrealized": self.short_unrealized,
            "long_unrealized": self.long_unrealized,
            "by_symbol": [g.to_dict() for g in self.by_symbol],
        }
