"""
Data models for the ledger pipeline.

Contains enums for categorical data and dataclasses for domain objects.
Raw and classified records are frozen: every run rebuilds them from the
ledger, and only Position is mutated while trades are replayed.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional


DEFAULT_CURRENCY = "EUR"
EXCHANGE_SEPARATOR = ":"

# Tolerances for floating-point dust
SHARE_EPSILON = 1e-5
CURRENCY_EPSILON = 1e-3


class Direction(Enum):
    """Trade direction."""

    BUY = "buy"
    SELL = "sell"

    def __str__(self) -> str:
        return self.value.title()


class FeeType(Enum):
    """Kinds of cost records split out of the ledger."""

    TRANSACTION_FEE = "Transaction Fee"
    WITHHOLDING_TAX = "Withholding Tax"

    def __str__(self) -> str:
        return self.value


class HoldingPeriodMethod(Enum):
    """How a sale spanning several lots is bucketed into short/long term."""

    OLDEST_LOT = "oldest_lot"  # whole sale follows the oldest lot consumed
    PER_LOT = "per_lot"  # each consumed lot is bucketed by its own age


class RecordKind(Enum):
    """Tagged variants a raw record can classify into."""

    CASH = "cash"
    FEE = "fee"
    TAX = "tax"
    DIVIDEND = "dividend"
    TRADE = "trade"
    SKIPPED = "skipped"


def split_symbol(full_symbol: str) -> tuple[str, str]:
    """
    Split a ledger symbol into its clean symbol and exchange code.

    Args:
        full_symbol: Symbol as stored in the ledger, e.g. "ASML:XAMS".

    Returns:
        Tuple of (symbol, exchange). Exchange is upper-cased, or "" if absent.
    """
    parts = full_symbol.split(EXCHANGE_SEPARATOR)
    symbol = parts[0]
    exchange = parts[1].upper() if len(parts) > 1 else ""
    return symbol, exchange


@dataclass(frozen=True)
class RawTransactionRecord:
    """
    A single ledger row after alias resolution.

    Text fields are kept as written (trimmed); classification lower-cases
    them itself. Numeric fields are already tolerant-parsed to floats.
    """

    symbol: str
    asset_type: str
    transaction_type: str
    quantity: float
    price_per_unit: float
    currency: str
    transaction_date: date
    row_index: int = 0
    # Full UTC timestamp when the source carries a time of day
    timestamp: Optional[datetime] = None

    @property
    def occurred_at(self) -> datetime:
        return self.timestamp or datetime.combine(self.transaction_date, time.min)


@dataclass(frozen=True)
class NormalizedTrade:
    """A buy or sell of an instrument, with a magnitude share count."""

    symbol: str
    full_symbol: str
    direction: Direction
    share_count: float
    unit_price: float
    currency: str
    date: date
    exchange: str = ""
    asset_type: str = ""
    timestamp: Optional[datetime] = None

    @property
    def occurred_at(self) -> datetime:
        """Execution time, midnight of the trade date when only a date is known."""
        return self.timestamp or datetime.combine(self.date, time.min)

    @property
    def is_buy(self) -> bool:
        return self.direction is Direction.BUY

    @property
    def is_sell(self) -> bool:
        return self.direction is Direction.SELL

    @property
    def value(self) -> float:
        """Gross value in the trade currency."""
        return self.share_count * self.unit_price

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "symbol": self.symbol,
            "full_symbol": self.full_symbol,
            "exchange": self.exchange,
            "type": str(self.direction),
            "shares": self.share_count,
            "price": self.unit_price,
            "value": self.value,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class FeeRecord:
    """A transaction fee or withholding tax. Amount is a magnitude."""

    fee_type: FeeType
    amount: float
    currency: str
    date: date
    symbol: Optional[str] = None

    @property
    def is_tax(self) -> bool:
        return self.fee_type is FeeType.WITHHOLDING_TAX

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "type": str(self.fee_type),
            "symbol": self.symbol,
            "amount": self.amount,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class DividendRecord:
    """A cash dividend received for an instrument."""

    symbol: str
    amount: float
    currency: str
    date: date
    full_symbol: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "symbol": self.symbol,
            "amount": self.amount,
            "currency": self.currency,
        }


@dataclass
class Position:
    """
    Weighted-average-cost position in one instrument.

    average_cost is only recomputed on acquisitions; disposals reduce
    share_count and total_cost proportionally.
    """

    symbol: str
    full_symbol: str
    currency: str
    asset_class: str = "Stock"
    exchange: str = ""
    share_count: float = 0.0
    total_cost: float = 0.0
    average_cost: float = 0.0
    first_acquisition_date: Optional[date] = None
    # Quote fields, filled in when a price collaborator supplies one
    current_price: Optional[float] = None
    price_change_pct: float = 0.0
    price_currency: Optional[str] = None
    price_source: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.share_count > SHARE_EPSILON

    @property
    def market_price(self) -> float:
        """Live price if quoted, otherwise average cost as a proxy."""
        if self.current_price is not None and self.current_price > 0:
            return self.current_price
        return self.average_cost

    @property
    def market_value(self) -> float:
        return self.share_count * self.market_price

    @property
    def cost_value(self) -> float:
        return self.share_count * self.average_cost

    @property
    def unrealized_gain(self) -> float:
        return self.market_value - self.cost_value

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "full_symbol": self.full_symbol,
            "type": self.asset_class,
            "exchange": self.exchange,
            "shares": self.share_count,
            "avg_price": self.average_cost,
            "current_price": self.market_price,
            "total_cost": self.total_cost,
            "market_value": self.market_value,
            "currency": self.currency,
            "purchase_date": self.first_acquisition_date.isoformat()
            if self.first_acquisition_date
            else None,
        }
